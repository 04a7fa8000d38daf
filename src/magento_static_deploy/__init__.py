"""Magento 2 static content deployer.

Copies Hyva theme assets layer by layer into ``pub/static`` and hands Luma
themes to ``bin/magento setup:static-content:deploy``.
"""

import typer

from magento_static_deploy.cli.commands import deploy

__version__ = "0.4.0"

app = typer.Typer(
    name="magento-static-deploy",
    help="Fast Magento 2 static content deployment",
    add_completion=False,
)

app.command()(deploy)


def main():
    app()


if __name__ == "__main__":
    main()
