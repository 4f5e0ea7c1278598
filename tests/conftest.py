import numpy as np
import pytest
import keras

from somnium.network import NetworkProvider


class FakeOracle:
  """Oracle returning a fixed loss and gradient, recording what it saw."""

  def __init__(self, loss=1.0, gradient_value=1.0):
    self.loss = loss
    self.gradient_value = gradient_value
    self.shapes = []

  def evaluate(self, image):
    self.shapes.append(image.shape[:2])
    return self.loss, np.full(image.shape, self.gradient_value, dtype=np.float32)


@pytest.fixture
def fake_oracle():
  return FakeOracle()


@pytest.fixture(scope="session")
def tiny_model():
  keras.utils.set_random_seed(0)
  inputs = keras.Input(shape=(None, None, 3))
  x = keras.layers.Conv2D(4, 3, padding="same", activation="tanh", name="conv_a")(inputs)
  x = keras.layers.Conv2D(6, 3, strides=2, padding="same", name="conv_b")(x)
  return keras.Model(inputs, x, name="tiny")


@pytest.fixture
def tiny_network(tiny_model):
  return NetworkProvider(tiny_model)


@pytest.fixture
def random_image():
  rng = np.random.RandomState(42)
  return rng.uniform(-1, 1, size=(24, 32, 3)).astype(np.float32)
