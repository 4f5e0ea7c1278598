"""Somnium

Somnium (Latin for "dream") is a small library for deep dream
image synthesis with pretrained convolutional networks.

A source photograph is ascended along the gradient of the squared
activations of selected layers, octave by octave, and the detail
lost when resizing is reinjected at every scale.
"""

__version__ = '0.1'
