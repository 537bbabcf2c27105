"""Classify command implementation.

Classifies a single directory without touching the store or the proxy.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.syntax import Syntax

from zerotouch.campaigns.classifier import classify
from zerotouch.campaigns.models import CampaignType
from zerotouch.campaigns.scanner import CampaignScanner
from zerotouch.cli.display import print_verdict
from zerotouch.cli.types import get_settings
from zerotouch.core.controller import skip_notice
from zerotouch.core.errors import CampaignIOError, SynthesisError
from zerotouch.proxy.synthesizer import ConfigSynthesizer
from zerotouch.utils.formatting import console, print_error, print_warning

logger = logging.getLogger(__name__)


def classify_campaign(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Argument(
            help="Campaign directory to classify.",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ],
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Classify a directory and show the config block it would get.

    Examples:
        zerotouch classify /var/www/campaigns/spring-sale
        zerotouch classify ./my-campaign --json
    """
    settings = get_settings(ctx)
    scanner = CampaignScanner(settings.markers)

    try:
        directory = scanner.snapshot(path)
    except CampaignIOError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    verdict = classify(directory)

    try:
        synthesizer = ConfigSynthesizer(settings.proxy.fastcgi_pass)
    except SynthesisError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    block_text: str | None = None
    suggestion: str | None = None
    notice = ""
    if verdict.is_deployable:
        try:
            block = synthesizer.synthesize(directory.name, verdict, directory.path)
        except SynthesisError as e:
            notice = str(e)
        else:
            block_text = block.text if block is not None else None
    else:
        notice = skip_notice(verdict)
        if verdict.campaign_type == CampaignType.FRAMEWORK_LIKE:
            try:
                suggestion = synthesizer.suggest_manual_block(directory.name, directory.path)
            except SynthesisError as e:
                logger.debug("No manual block suggestion for %s: %s", directory.name, e)

    if json_output:
        data = {
            "name": directory.name,
            "path": directory.path,
            "verdict": verdict.to_dict(),
            "block": block_text,
            "notice": notice or None,
            "suggested_block": suggestion,
        }
        console.print_json(json.dumps(data))
        return

    print_verdict(directory, verdict)
    console.print()
    if block_text is not None:
        console.print(Syntax(block_text, "nginx", theme="ansi_dark", background_color="default"))
    else:
        print_warning(notice)
    if suggestion is not None:
        console.print()
        console.print(Syntax(suggestion, "nginx", theme="ansi_dark", background_color="default"))
