"""
Deep dream loss and its gradient with respect to the input image.

The loss is the weighted sum of the mean squared activations of the
selected layers:

  loss = sum(coeff * sum(activation ** 2) / activation.size)
"""

import numpy as np
import tensorflow as tf

from somnium.config import validate_layer_contributions


GRADIENT_EPSILON = 1e-7


def normalize_gradient(gradient, epsilon=GRADIENT_EPSILON):
  """
  Normalize the gradient by its mean absolute value.
  :param gradient:    Gradient tensor.
  :param epsilon:     Floor of the divisor.
  :return:            Gradient with mean absolute value 1 (unless the mean was below epsilon).
  """

  gradient = tf.convert_to_tensor(gradient, dtype=tf.float32)
  return gradient / tf.maximum(tf.reduce_mean(tf.abs(gradient)), epsilon)


def layer_loss(activation, coeff):
  """Contribution of one layer, scaled by its number of elements."""
  scaling = tf.reduce_prod(tf.cast(tf.shape(activation), tf.float32))
  return coeff * tf.reduce_sum(tf.square(activation)) / scaling


class LossOracle:
  """Evaluates the deep dream loss and its normalized gradient.

  Built once from a network provider and the layer contributions; a missing
  layer raises OracleError right away. Evaluation never updates the
  network, so one oracle can serve several renderings.
  """

  def __init__(self, network, layer_contributions):
    self.network = network
    self.layer_contributions = validate_layer_contributions(layer_contributions)
    self._extractor = network.feature_extractor(list(self.layer_contributions))
    self._loss_and_gradient = tf.function(self._compute_loss_and_gradient, reduce_retracing=True)

  def compute_loss(self, batch):
    features = self._extractor(batch, training=not self.network.frozen)
    loss = tf.zeros(shape=())
    for name, coeff in self.layer_contributions.items():
      loss += layer_loss(features[name], coeff)
    return loss

  def _compute_loss_and_gradient(self, batch):
    with tf.GradientTape() as tape:
      tape.watch(batch)
      loss = self.compute_loss(batch)
    gradient = tape.gradient(loss, batch)
    return loss, normalize_gradient(gradient)

  def evaluate(self, image):
    """
    Compute the loss and its gradient for an image.
    :param image:     Image tensor (height, width, 3).
    :return:          Tuple (loss as float, normalized gradient of the image's shape).
    """

    batch = tf.convert_to_tensor(np.expand_dims(np.asarray(image, dtype=np.float32), axis=0))
    loss, gradient = self._loss_and_gradient(batch)
    return float(loss), gradient.numpy()[0]
