"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
TransparentLog, a product of Garudex Labs

Shared state for tlog commands.

The top-level group loads configuration once and stores it on a CLIContext;
subcommands receive it through pass_context and open the log it describes.
"""

from typing import Optional

import click

from transparentlog.config.settings import TransparentLogConfig


class CLIContext:
    """
    State handed from the tlog group to its subcommands.

    Attributes:
        config: Loaded configuration (storage backend, client state, logging)
        config_path: Path given with --config, or None when defaults were used
        verbose: Whether --verbose was passed
    """

    def __init__(self):
        self.config: Optional[TransparentLogConfig] = None
        self.config_path: Optional[str] = None
        self.verbose = False


pass_context = click.make_pass_decorator(CLIContext, ensure=True)
