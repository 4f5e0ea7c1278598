from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
import tensorflow as tf

from somnium.errors import OracleError
from somnium.oracle import LossOracle, normalize_gradient


def test_normalize_gradient_mean_abs_is_one():
  rng = np.random.RandomState(1)
  gradient = rng.normal(0, 0.003, size=(5, 6, 3)).astype(np.float32)

  normalized = normalize_gradient(gradient).numpy()

  assert normalized.shape == gradient.shape
  assert np.mean(np.abs(normalized)) == pytest.approx(1.0, rel=1e-5)


def test_normalize_gradient_tiny_gradient_divides_by_floor():
  gradient = np.full((2, 2, 3), 1e-9, dtype=np.float32)

  np.testing.assert_allclose(normalize_gradient(gradient).numpy(), 1e-9 / 1e-7, rtol=1e-5)


def test_normalize_zero_gradient_stays_zero():
  assert not np.any(normalize_gradient(np.zeros((3, 3, 3), dtype=np.float32)).numpy())


def test_loss_matches_activations(tiny_network, random_image):
  contributions = {"conv_a": 0.5, "conv_b": 2.0}
  oracle = LossOracle(tiny_network, contributions)

  loss, _ = oracle.evaluate(random_image)

  activations = tiny_network.activations(random_image, list(contributions))
  expected = sum(coeff * np.sum(np.square(activations[name])) / activations[name].size
                 for name, coeff in contributions.items())
  assert loss == pytest.approx(expected, rel=1e-4)
  assert loss >= 0


def test_gradient_is_normalized_and_image_shaped(tiny_network, random_image):
  oracle = LossOracle(tiny_network, {"conv_b": 1.0})

  _, gradient = oracle.evaluate(random_image)

  assert gradient.shape == random_image.shape
  assert np.mean(np.abs(gradient)) == pytest.approx(1.0, rel=1e-4)


def test_gradient_points_uphill(tiny_network, random_image):
  oracle = LossOracle(tiny_network, {"conv_a": 1.0})

  loss, gradient = oracle.evaluate(random_image)
  higher, _ = oracle.evaluate(random_image + 1e-3 * gradient)

  assert higher > loss


def test_evaluate_accepts_different_shapes(tiny_network, random_image):
  oracle = LossOracle(tiny_network, {"conv_a": 1.0})

  _, small = oracle.evaluate(random_image[:10, :12])
  _, large = oracle.evaluate(random_image)

  assert small.shape == (10, 12, 3)
  assert large.shape == random_image.shape


def test_evaluate_does_not_change_weights(tiny_network, random_image):
  before = [np.array(w) for w in tiny_network.model.get_weights()]
  oracle = LossOracle(tiny_network, {"conv_a": 1.0, "conv_b": 1.0})

  oracle.evaluate(random_image)
  oracle.evaluate(random_image)

  for old, new in zip(before, tiny_network.model.get_weights()):
    np.testing.assert_array_equal(old, new)


def test_missing_layer_fails_at_construction(tiny_network):
  with pytest.raises(OracleError, match="mixed5"):
    LossOracle(tiny_network, {"conv_a": 1.0, "mixed5": 1.5})


def test_evaluate_returns_numpy(tiny_network, random_image):
  loss, gradient = LossOracle(tiny_network, {"conv_a": 1.0}).evaluate(random_image)

  assert isinstance(loss, float)
  assert isinstance(gradient, np.ndarray)
  assert not tf.is_tensor(gradient)


def test_oracle_shared_between_threads(tiny_network, random_image):
  oracle = LossOracle(tiny_network, {"conv_a": 1.0, "conv_b": 0.5})
  expected_loss, expected_gradient = oracle.evaluate(random_image)

  with ThreadPoolExecutor(max_workers=8) as pool:
    results = list(pool.map(lambda _: oracle.evaluate(random_image), range(16)))

  for loss, gradient in results:
    assert loss == pytest.approx(expected_loss, rel=1e-6)
    np.testing.assert_allclose(gradient, expected_gradient, rtol=1e-5, atol=1e-6)
