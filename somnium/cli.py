#!/usr/bin/env python3
"""The CLI tool of somnium library.

This gets called as `somnium` after installing using `pip`.
"""
import logging
import os

import click

from somnium import config
from somnium.errors import DreamError


@click.group()
def run_app():
    pass


@run_app.command()
@click.argument("input_image", type=click.Path(dir_okay=False))
@click.option("-n", "--network", help="Architecture of the neural network", type=str, default=config.DEFAULT_NETWORK,
              show_default=True)
@click.option("-l", "--layers", help="Layers to maximize with their weights (e.g. 'mixed4=1.0,mixed5=1.5').",
              type=str, default=None)
@click.option("-s", "--step", help="Gradient ascent step size", type=float, default=config.DEFAULT_STEP,
              show_default=True)
@click.option("-O", "--num-octaves", help="Number of scales at which to run gradient ascent", type=int,
              default=config.DEFAULT_NUM_OCTAVES, show_default=True)
@click.option("-S", "--octave-scale", help="Size ratio between scales", type=float,
              default=config.DEFAULT_OCTAVE_SCALE, show_default=True)
@click.option("-N", "--iterations", help="Number of ascent steps to run at each scale", type=int,
              default=config.DEFAULT_ITERATIONS, show_default=True)
@click.option("-m", "--max-loss", help="Interrupt the ascent when the loss grows larger than this.", type=float,
              default=config.DEFAULT_MAX_LOSS, show_default=True)
@click.option("-u", "--unbounded", is_flag=True, help="Never interrupt the ascent, whatever the loss.")
@click.option("-o", "--output-dir", help="Directory to write the image to (otherwise just show in a new window).")
@click.option("--save-octaves", is_flag=True, help="Also write the dream at every scale (needs --output-dir).")
@click.option("-v", "--verbose", is_flag=True, help="Produce verbose output.")
def render(input_image, network, layers, output_dir, verbose, save_octaves, unbounded, **kwargs):
    """Dream on an image.

    Examples:

    \b
      # Dream on mountains with the default layer (mixed5 of InceptionV3)
      somnium render docs/mountain.jpeg -o mountains/

    \b
      # More layers, more octaves, no loss limit
      somnium render docs/mountain.jpeg -l mixed3=0.5,mixed4=2 -O 5 -u -o mountains/
    """
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
        click.echo("Loading tensorflow...")
    from somnium import utils

    try:
        contributions = (config.parse_layer_contributions(layers) if layers
                         else dict(config.DEFAULT_LAYER_CONTRIBUTIONS))
        params = config.validate_parameters(
            step=kwargs["step"],
            iterations=kwargs["iterations"],
            num_octaves=kwargs["num_octaves"],
            octave_scale=kwargs["octave_scale"],
            max_loss=None if unbounded else kwargs["max_loss"],
        )
        if save_octaves and not output_dir:
            raise click.UsageError("--save-octaves requires --output-dir.")

        image = utils.load_image(input_image)

        if verbose:
            click.echo(f"Creating model {network}...")
        renderer = DeepDreamRenderer(network, contributions)

        octave_callback = None
        basename = os.path.splitext(os.path.basename(input_image))[0]
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
            if save_octaves:
                def octave_callback(shape, octave_image):
                    path = os.path.join(output_dir, "{0}-dream_at_scale_{1}x{2}.png".format(basename, *shape))
                    utils.save_image(octave_image, path)

        if verbose:
            click.echo(f"Dreaming on {input_image} ({image.shape[0]}x{image.shape[1]})...")
        dream = renderer.render(image, params, octave_callback=octave_callback)
    except DreamError as ex:
        raise click.ClickException(str(ex))

    if output_dir:
        output_path = os.path.join(output_dir, basename + "-dream.png")
        utils.save_image(dream, output_path)
        if verbose:
            click.echo(f"Dream written to {output_path}")
    else:
        utils.show_images([image, dream], titles=["Original Image", "Dream Image"])


@run_app.command()
@click.argument("directory", type=click.Path(file_okay=False))
def images(directory):
    """List images available for dreaming in a directory."""
    from somnium import utils

    try:
        names = utils.list_images(directory)
    except DreamError as ex:
        raise click.ClickException(str(ex))
    for name in names:
        click.echo(name)


@run_app.command()
def networks():
    """List available network architectures (from keras.applications).

    Note that the layer names differ between architectures.
    """
    from somnium.network import available_networks

    click.echo("Available network architectures:")
    for candidate in available_networks():
        click.echo("  " + candidate)


@run_app.command()
@click.argument("network")
@click.option("-n", "--name", help="Regular expression for layer name to search for")
def layers(network, name):
    """List available layers in a network.

    Examples:

    \b
      somnium layers InceptionV3
      somnium layers InceptionV3 -n mixed
    """
    from somnium.network import NetworkProvider

    try:
        provider = NetworkProvider.from_application(network, weights=None)
    except DreamError as ex:
        raise click.ClickException(str(ex))
    for layer_name in provider.layer_names(pattern=name):
        layer = provider.model.get_layer(layer_name)
        click.echo(f"{layer.name} {layer.__class__.__name__} {list(layer.output.shape)}")


@run_app.command()
@click.argument("network")
@click.option("-o", "--output-path", help="Path to write the graph to (in dot format).")
def graph(network, output_path):
    """Create a graph of the network architecture."""
    from somnium import utils
    from somnium.network import NetworkProvider

    try:
        provider = NetworkProvider.from_application(network, weights=None)
    except DreamError as ex:
        raise click.ClickException(str(ex))
    dot = utils.create_graph(provider.model)

    if not output_path:
        dot.view()
    else:
        dot.save(output_path)


class DeepDreamRenderer:
    """Class representation of the deep dream rendering with its network and loss."""

    def __init__(self, network, layer_contributions, weights=config.DEFAULT_WEIGHTS):
        from somnium.network import NetworkProvider
        from somnium.oracle import LossOracle
        self.provider = NetworkProvider.from_application(network, weights=weights)
        self.oracle = LossOracle(self.provider, layer_contributions)

    def render(self, image, params, octave_callback=None, cancellation=None):
        from somnium import deep_dream
        return deep_dream.render_deepdream(
            oracle=self.oracle,
            base_image=image,
            iterations=params.iterations,
            step=params.step,
            num_octaves=params.num_octaves,
            octave_scale=params.octave_scale,
            max_loss=params.max_loss,
            octave_callback=octave_callback,
            cancellation=cancellation,
        )


if __name__ == "__main__":
    run_app()
