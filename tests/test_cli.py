import numpy as np
import pytest
from click.testing import CliRunner
from PIL import Image

from somnium import cli
from somnium.network import NetworkProvider
from somnium.oracle import LossOracle


@pytest.fixture
def runner():
  return CliRunner()


@pytest.fixture
def photo(tmp_path):
  path = tmp_path / "photo.png"
  Image.fromarray(np.full((16, 20, 3), 128, dtype=np.uint8)).save(str(path))
  return str(path)


@pytest.fixture
def tiny_renderer(monkeypatch, tiny_model):
  """Replace the pretrained application with the tiny test network."""

  def init(self, network, layer_contributions, weights=None):
    self.provider = NetworkProvider(tiny_model)
    self.oracle = LossOracle(self.provider, layer_contributions)

  monkeypatch.setattr(cli.DeepDreamRenderer, "__init__", init)


def test_networks(runner):
  result = runner.invoke(cli.run_app, ["networks"])

  assert result.exit_code == 0
  assert "InceptionV3" in result.output


def test_images(runner, tmp_path):
  (tmp_path / "sky.jpg").write_bytes(b"")
  (tmp_path / "readme.txt").write_bytes(b"")

  result = runner.invoke(cli.run_app, ["images", str(tmp_path)])

  assert result.exit_code == 0
  assert result.output.split() == ["sky.jpg"]


def test_render_rejects_bad_parameters(runner, photo):
  result = runner.invoke(cli.run_app, ["render", photo, "-N", "0"])

  assert result.exit_code != 0
  assert "iterations" in result.output


def test_render_rejects_unreadable_image(runner, tmp_path):
  result = runner.invoke(cli.run_app, ["render", str(tmp_path / "missing.jpg"), "-o", str(tmp_path)])

  assert result.exit_code != 0
  assert "Cannot read image" in result.output


def test_render_rejects_missing_layer(runner, photo, tmp_path, tiny_renderer):
  result = runner.invoke(cli.run_app, ["render", photo, "-l", "mixed5", "-o", str(tmp_path / "out")])

  assert result.exit_code != 0
  assert "mixed5" in result.output


def test_render_writes_dream_and_octaves(runner, photo, tmp_path, tiny_renderer):
  out = tmp_path / "out"

  result = runner.invoke(cli.run_app, [
    "render", photo, "-l", "conv_a=1,conv_b=0.5", "-O", "1", "-N", "2", "-u",
    "-o", str(out), "--save-octaves",
  ])

  assert result.exit_code == 0, result.output
  assert sorted(p.name for p in out.iterdir()) == [
    "photo-dream.png",
    "photo-dream_at_scale_11x14.png",
    "photo-dream_at_scale_16x20.png",
  ]
  with Image.open(str(out / "photo-dream.png")) as im:
    assert im.size == (20, 16)


def test_save_octaves_requires_output_dir(runner, photo):
  result = runner.invoke(cli.run_app, ["render", photo, "--save-octaves"])

  assert result.exit_code != 0
  assert "--output-dir" in result.output


@pytest.mark.parametrize("option", [["-S", "nan"], ["-s", "nan"], ["-s", "inf"], ["-m", "nan"]])
def test_render_rejects_non_finite_parameters(runner, photo, option):
  result = runner.invoke(cli.run_app, ["render", photo] + option)

  assert result.exit_code != 0
  assert "finite" in result.output
