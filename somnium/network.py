"""
Pretrained networks used to compute activations.
"""

import re

import numpy as np
import keras

from somnium.errors import InputError, OracleError


def available_networks():
  """All network architectures available in keras.applications.

  Based on the assumption that each constructor name starts
  with a capital letter."""
  candidates = dir(keras.applications)
  return [candidate for candidate in candidates if candidate[0].isupper()]


class NetworkProvider:
  """A keras model exposing the activations of its named layers.

  The frozen flag belongs to the instance: a frozen provider runs the model
  in inference mode on every call. The keras model itself is left as it is,
  so providers with different flags can share one model.
  """

  def __init__(self, model, frozen=True):
    self.model = model
    self.frozen = frozen

  @classmethod
  def from_application(cls, name, weights="imagenet", frozen=True):
    """
    Build a convolutional backbone (without classification head) of keras.applications.
    :param name:      Constructor name, e.g. "InceptionV3".
    :param weights:   Pretrained weights ("imagenet", a path or None for random).
    :param frozen:    Run the network in inference mode only.
    :return:          NetworkProvider.
    """

    if name not in available_networks():
      raise InputError("Network {} not available. Run `somnium networks` to display valid options.".format(name))
    constructor = getattr(keras.applications, name)
    return cls(constructor(weights=weights, include_top=False), frozen=frozen)

  @property
  def name(self):
    return self.model.name

  def layer_names(self, pattern=None):
    """Names of the layers, optionally only those matching a regular expression."""
    names = [layer.name for layer in self.model.layers]
    if pattern:
      names = [name for name in names if re.search(pattern, name)]
    return names

  def has_layer(self, name):
    return name in self.layer_names()

  def feature_extractor(self, layer_names):
    """
    Create a model that returns the activations of the selected layers.
    :param layer_names:   Names of the layers.
    :return:              keras.Model returning a dict layer name -> activation.
    """

    missing = [name for name in layer_names if not self.has_layer(name)]
    if missing:
      raise OracleError("Layers not found in network {}: {}".format(self.name, ", ".join(missing)))

    outputs = {name: self.model.get_layer(name).output for name in layer_names}
    return keras.Model(inputs=self.model.inputs, outputs=outputs)

  def activations(self, image, layer_names):
    """Activations (as numpy arrays) of the selected layers for one image."""
    extractor = self.feature_extractor(layer_names)
    batch = np.expand_dims(np.asarray(image, dtype=np.float32), axis=0)
    features = extractor(batch, training=not self.frozen)
    return {name: np.asarray(value) for name, value in features.items()}
