"""
Octave pyramid: the image shapes at which gradient ascent runs.
"""

import math


def octave_shape(original_shape, octave_scale, octave):
  """
  Shape of the image in the given octave.
  :param original_shape:  (height, width) of the original image.
  :param octave_scale:    Size ratio between two consecutive octaves.
  :param octave:          Index of the octave, 0 is the original size.
  :return:                (height, width), every dimension at least 1 pixel.
  """

  factor = octave_scale ** octave
  return tuple(max(1, int(math.floor(dim / factor))) for dim in original_shape)


def plan_octaves(original_shape, num_octaves, octave_scale):
  """
  Prepare the list of shapes to run gradient ascent at.
  :param original_shape:  (height, width) of the original image.
  :param num_octaves:     Number of downscaled octaves.
  :param octave_scale:    Size ratio between octaves.
  :return:                num_octaves + 1 shapes, smallest first, original shape last.

  Note: Small images may collapse several octaves into the same shape,
  in which case the shape is simply repeated.
  """

  original_shape = tuple(int(dim) for dim in original_shape[:2])
  shapes = [original_shape]
  for octave in range(1, num_octaves + 1):
    shapes.append(octave_shape(original_shape, octave_scale, octave))

  # increasing order
  return shapes[::-1]
