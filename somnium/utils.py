import os

import numpy as np
import tensorflow as tf
import matplotlib.pyplot as plt
from PIL import Image, UnidentifiedImageError

from somnium.errors import ImageReadError, InputError


IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tif", ".tiff", ".webp")


def preprocess_image(raster):
  """
  Convert a raster image into the network input range.
  :param raster:      Image as (height, width, 3) array with values 0 to 255.
  :return:            float32 image tensor with values -1 to 1.
  """

  image = np.asarray(raster, dtype=np.float32)
  return image / 127.5 - 1.0


def load_image(path):
  """
  Load an image file as a network input tensor (in original resolution).
  :param path:        Path to the image.
  :return:            float32 (height, width, 3) tensor with values -1 to 1.
  """

  try:
    with Image.open(path) as im:
      raster = np.asarray(im.convert("RGB"))
  except (OSError, UnidentifiedImageError) as ex:
    raise ImageReadError("Cannot read image {}: {}".format(path, ex)) from ex

  return preprocess_image(raster)


def to_displayable(image):
  """Convert a tensor into a valid image.

  Undoes the preprocessing done by `preprocess_image` and saturates
  every value to the range 0 to 255.

  :param image:     Image tensor, (height, width, 3) or (1, height, width, 3).
  :return:          uint8 (height, width, 3) array.
  """
  image = np.asarray(image, dtype=np.float32)
  image = image.reshape((image.shape[-3], image.shape[-2], 3))
  image = (image / 2.0 + 0.5) * 255.0
  image = np.clip(image, 0, 255)
  return image.astype(np.uint8)


def resize_image(image, size, method="bicubic"):
  """
  Resize an image tensor to an exact shape.
  :param image:     Image tensor (height, width, channels).
  :param size:      Target (height, width).
  :param method:    Interpolation method of `tf.image.resize`.
  :return:          New float32 numpy tensor of shape (*size, channels).
  """

  size = [int(dim) for dim in size]
  if len(size) != 2 or min(size) < 1:
    raise InputError("Cannot resize image to {}.".format(tuple(size)))

  image = np.asarray(image, dtype=np.float32)
  # shrinking without a low-pass filter aliases
  antialias = size[0] < image.shape[0] or size[1] < image.shape[1]
  resized = tf.image.resize(image, size, method=method, antialias=antialias)
  return np.array(resized, dtype=np.float32)


def save_image(image, path):
  """Save image tensor.

  :param image: Image tensor in the network input range.
  :param path: Where to store the image (format is chosen by the extension).
  """
  im = Image.fromarray(to_displayable(image))
  im.save(path)


def show_image(image, axis=None):
  """ Show an image tensor.

  :param image:       An image tensor.
  :param axis:        Matplotlib axis where to draw (otherwise draw and show a new figure).
  :return:            None.
  """
  if axis is None:
    plt.axis('off')
    plt.imshow(to_displayable(image))
    plt.show()
  else:
    axis.axis('off')
    axis.imshow(to_displayable(image))


def show_images(images, titles=None):
  """Show image tensors side by side (e.g. the original and the dream)."""
  titles = titles or [None] * len(images)
  fig, axes = plt.subplots(1, len(images), squeeze=False, figsize=(5 * len(images), 5))
  for axis, image, title in zip(axes[0], images, titles):
    show_image(image, axis=axis)
    if title:
      axis.set_title(title)
  fig.tight_layout()
  plt.show()


def list_images(directory):
  """Names of image files in a directory, sorted."""
  if not os.path.isdir(directory):
    raise InputError("Not a directory: {}".format(directory))
  return sorted(
    name for name in os.listdir(directory)
    if name.lower().endswith(IMAGE_EXTENSIONS) and os.path.isfile(os.path.join(directory, name))
  )


def _inbound_layers(nodes):
  """Names of the layers feeding a layer, from its serialized inbound nodes."""
  names = []
  if isinstance(nodes, dict):
    if "keras_history" in nodes:
      names.append(nodes["keras_history"][0])
    else:
      for value in nodes.values():
        names.extend(_inbound_layers(value))
  elif isinstance(nodes, (list, tuple)):
    if len(nodes) >= 3 and isinstance(nodes[0], str) and isinstance(nodes[1], int):
      names.append(nodes[0])
    else:
      for value in nodes:
        names.extend(_inbound_layers(value))
  return names


def create_graph(model):
  """Create a graphviz graph of a network.

  :param model: A functional keras model.
  :return: The dot graph
  """
  from graphviz import Digraph

  dot = Digraph()
  for layer in model.get_config()["layers"]:
    name = layer["name"]
    dot.node(name, label="{} ({})".format(name, layer["class_name"]))
    for inbound in _inbound_layers(layer.get("inbound_nodes", [])):
      # Edges are determined by the names of the layers
      dot.edge(inbound, name)

  return dot
