"""
Multiscale deep dream: gradient ascent over an octave pyramid with
reinjection of the detail lost by resizing.
"""

import logging

import numpy as np

from somnium import pyramid, utils
from somnium.config import validate_parameters, DEFAULT_ITERATIONS, DEFAULT_NUM_OCTAVES, DEFAULT_OCTAVE_SCALE, \
  DEFAULT_STEP


logger = logging.getLogger(__name__)


def gradient_ascent(oracle, image, iterations, step, max_loss=None, loss_callback=None, cancellation=None):
  """
  Run gradient ascent on one image at one scale.
  :param oracle:          Object with `evaluate(image) -> (loss, gradient)`.
  :param image:           Image tensor.
  :param iterations:      Number of ascent steps.
  :param step:            Size of step.
  :param max_loss:        Stop as soon as the loss exceeds this value (None for no limit).
  :param loss_callback:   Called as `loss_callback(iteration, loss)` after each step.
  :param cancellation:    CancellationToken checked before each step.
  :return:                New image tensor of the same shape.

  Note: Exceeding `max_loss` is not an error, the image from before
  the offending evaluation is returned as it is.
  """

  image = np.array(image, dtype=np.float32)

  for i in range(iterations):
    if cancellation is not None:
      cancellation.raise_if_cancelled()

    loss, gradient = oracle.evaluate(image)
    if max_loss is not None and loss > max_loss:
      logger.info("...Loss value %f at %d exceeds %f, stopping", loss, i, max_loss)
      break

    image = image + step * gradient
    logger.info("...Loss value at %d: %f", i, loss)
    if loss_callback is not None:
      loss_callback(i, loss)

  return image


def render_deepdream(oracle, base_image, iterations=DEFAULT_ITERATIONS, step=DEFAULT_STEP,
                     num_octaves=DEFAULT_NUM_OCTAVES, octave_scale=DEFAULT_OCTAVE_SCALE, max_loss=None,
                     loss_callback=None, octave_callback=None, cancellation=None):
  """
  Renders deep dream image.
  :param oracle:          Object with `evaluate(image) -> (loss, gradient)`.
  :param base_image:      Original image tensor (height, width, 3).
  :param iterations:      Number of ascent steps per octave.
  :param step:            Size of step.
  :param num_octaves:     Number of downscaled octaves.
  :param octave_scale:    Size ratio between octaves.
  :param max_loss:        Loss limit of the ascent in every octave (None for no limit).
  :param loss_callback:   Called as `loss_callback(iteration, loss)` after each ascent step.
  :param octave_callback: Called as `octave_callback(shape, image)` after each octave.
  :param cancellation:    CancellationToken checked before each octave and each step.
  :return:                Generated image, same shape as `base_image`.

  """

  params = validate_parameters(step=step, iterations=iterations, num_octaves=num_octaves,
                               octave_scale=octave_scale, max_loss=max_loss)

  original_image = np.array(base_image, dtype=np.float32)
  shapes = pyramid.plan_octaves(original_image.shape[:2], params.num_octaves, params.octave_scale)

  shrunk_original = utils.resize_image(original_image, shapes[0])
  image = original_image

  # octaves must be visited from the smallest one
  for shape in shapes:
    if cancellation is not None:
      cancellation.raise_if_cancelled()
    logger.info("Processing image shape %s", shape)

    image = utils.resize_image(image, shape)
    image = gradient_ascent(oracle, image, params.iterations, params.step, params.max_loss,
                            loss_callback=loss_callback, cancellation=cancellation)

    # the upscaled shrunk original is pixelated, the difference is the lost detail
    upscaled_shrunk = utils.resize_image(shrunk_original, shape)
    same_size_original = utils.resize_image(original_image, shape)
    lost_detail = same_size_original - upscaled_shrunk

    image = image + lost_detail
    shrunk_original = same_size_original

    if octave_callback is not None:
      octave_callback(shape, image)

  return image
