"""
Default settings and validation of rendering parameters.
"""

import math
from collections import namedtuple

from somnium.errors import InputError


DEFAULT_NETWORK = "InceptionV3"
DEFAULT_WEIGHTS = "imagenet"

# Layer name -> weight of its activation energy in the loss.
DEFAULT_LAYER_CONTRIBUTIONS = {
  "mixed5": 1.5,
}

DEFAULT_STEP = 0.02
DEFAULT_NUM_OCTAVES = 3
DEFAULT_OCTAVE_SCALE = 1.4
DEFAULT_ITERATIONS = 5
DEFAULT_MAX_LOSS = 5.0


AscentParameters = namedtuple("AscentParameters", ["step", "iterations", "num_octaves", "octave_scale", "max_loss"])


def _is_integer(value):
  return value is not None and math.isfinite(value) and int(value) == value


def validate_parameters(step=DEFAULT_STEP, iterations=DEFAULT_ITERATIONS, num_octaves=DEFAULT_NUM_OCTAVES,
                        octave_scale=DEFAULT_OCTAVE_SCALE, max_loss=None):
  """
  Check rendering parameters and pack them.
  :param step:          Gradient ascent step size (> 0).
  :param iterations:    Number of ascent steps per octave (>= 1).
  :param num_octaves:   Number of downscaled octaves (>= 1).
  :param octave_scale:  Size ratio between octaves (> 1.0).
  :param max_loss:      Loss above which the ascent stops, None for no limit.
  :return:              AscentParameters.
  """

  if step is None or not math.isfinite(step) or step <= 0:
    raise InputError("Step size must be a finite positive number, got {}.".format(step))
  if not _is_integer(iterations) or iterations < 1:
    raise InputError("Number of iterations must be an integer >= 1, got {}.".format(iterations))
  if not _is_integer(num_octaves) or num_octaves < 1:
    raise InputError("Number of octaves must be an integer >= 1, got {}.".format(num_octaves))
  if octave_scale is None or not math.isfinite(octave_scale) or octave_scale <= 1.0:
    raise InputError("Octave scale must be a finite number larger than 1.0, got {}.".format(octave_scale))
  if max_loss is not None and (not math.isfinite(max_loss) or max_loss < 0):
    raise InputError("Maximum loss must be a finite number >= 0, got {}.".format(max_loss))

  return AscentParameters(
    step=float(step),
    iterations=int(iterations),
    num_octaves=int(num_octaves),
    octave_scale=float(octave_scale),
    max_loss=None if max_loss is None else float(max_loss),
  )


def validate_layer_contributions(contributions):
  """Check that the layer map is non-empty and all weights are non-negative."""
  if not contributions:
    raise InputError("At least one layer must contribute to the loss.")
  for name, coeff in contributions.items():
    if not name:
      raise InputError("Layer names must not be empty.")
    if not math.isfinite(coeff) or coeff < 0:
      raise InputError("Weight of layer {} must be a finite number >= 0, got {}.".format(name, coeff))
  return dict(contributions)


def parse_layer_contributions(text):
  """Parse layer contributions from "name=weight" pairs separated by commas.

  A name without a weight contributes with weight 1.0, e.g.
  "mixed4,mixed5=1.5" -> {"mixed4": 1.0, "mixed5": 1.5}.
  """
  contributions = {}
  for item in (text or "").split(","):
    item = item.strip()
    if not item:
      continue
    name, sep, weight = item.partition("=")
    name = name.strip()
    if sep:
      try:
        coeff = float(weight)
      except ValueError:
        raise InputError("Invalid weight for layer {}: {!r}.".format(name, weight.strip()))
    else:
      coeff = 1.0
    contributions[name] = coeff

  return validate_layer_contributions(contributions)
