"""Command implementations for the magento-static-deploy CLI."""

from magento_static_deploy.cli.commands.deploy_cmd import deploy

__all__ = ["deploy"]
