import sys

import click

from .errors import StoreOpenError, WowcigError
from .extract import PRODUCTS, ExtractSettings, run_extraction
from .utils import make_logger, read_config


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-c", "--cache", default=None, help="Cache directory  [default: cache]")
@click.option(
    "-d",
    "--db2",
    multiple=True,
    help="Table to extract as db2/<name>.db2. May be given more than once.",
)
@click.option(
    "-e", "--extracts", default=None, help="Extracts directory  [default: extracts]"
)
@click.option(
    "-p",
    "--product",
    required=True,
    type=click.Choice(PRODUCTS),
    help="WoW product",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose printing.")
@click.option(
    "-x", "--skip-framexml", is_flag=True, help="Skip framexml extraction."
)
@click.option(
    "-z",
    "--zip",
    "zip_output",
    is_flag=True,
    help="Write zip files instead of directory trees.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a YAML config file.",
)
def cli(cache, db2, extracts, product, verbose, skip_framexml, zip_output, config_path):
    """
    Extract interface files and db2 tables from a WoW product's archive.
    """
    config = read_config(config_path)
    settings = ExtractSettings.from_config(
        config,
        product=product,
        cache=cache,
        extracts=extracts,
        db2=db2 or None,
        skip_framexml=skip_framexml or None,
        zip_output=zip_output or None,
    )
    log = make_logger(verbose)

    try:
        result = run_extraction(settings, log=log)
    except StoreOpenError as e:
        click.echo(f"unable to open {product}: {e}", err=True)
        sys.exit(1)
    except WowcigError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    stats = result.stats
    click.echo(
        f"Wrote {stats.written} files ({stats.skipped} skipped) "
        f"for {product} {result.version}"
    )


def main():
    cli()


if __name__ == "__main__":
    main()
