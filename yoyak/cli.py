from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import typer

from . import app as yoyak_app
from . import __version__
from .config import Settings, read_settings_file, save_settings, settings_path
from .errors import Cancelled, InvalidLanguage, YoyakError
from .languages import normalize_language
from .logging import configure_logging
from .models import MODELS, is_model_moniker

app = typer.Typer(help="An LLM-powered CLI tool for summarizing and translating Markdown text.")

config_app = typer.Typer(help="Inspect and change stored settings")
app.add_typer(config_app, name="config")


def _language(value: str | None, *, hint: str = "--language") -> str | None:
    if value is None:
        return None
    try:
        return normalize_language(value)
    except InvalidLanguage as exc:
        raise typer.BadParameter(str(exc), param_hint=hint) from exc


def _settings(**overrides: object) -> Settings:
    return Settings(**{key: value for key, value in overrides.items() if value is not None})


def _run(coro: Coroutine[Any, Any, object]) -> Any:
    """Run ``coro`` and map engine errors onto exit codes."""
    try:
        return asyncio.run(coro)
    except Cancelled:
        typer.echo("\nInterrupted.", err=True)
        raise typer.Exit(130) from None
    except YoyakError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from None


def _version(value: bool) -> None:
    if value:
        typer.echo(f"yoyak {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine events to stderr"),
    version: bool = typer.Option(
        False, "--version", callback=_version, is_eager=True, help="Show the version and exit"
    ),
) -> None:
    configure_logging("DEBUG" if verbose else None)


@app.command("translate")
def translate_command(
    source: typer.FileText = typer.Argument("-", help="Markdown file to translate, or - for stdin"),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Target language (ISO 639-1); defaults to settings"
    ),
    model: str | None = typer.Option(None, help="Model to use"),
    max_continuations: int | None = typer.Option(
        None, min=0, help="Give up after this many continuation turns"
    ),
) -> None:
    """Translate Markdown text into another language."""
    settings = _settings(model=model, max_continuations=max_continuations)
    target = _language(language or settings.language)
    text = source.read()
    _run(yoyak_app.run_translate(text, target, settings=settings))


@app.command("summarize")
def summarize_command(
    source: typer.FileText = typer.Argument("-", help="Markdown file to summarize, or - for stdin"),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Also translate the summary into this language"
    ),
    paragraphs: int | None = typer.Option(
        None, "--paragraphs", "-p", min=1, help="Number of paragraphs in the summary"
    ),
    model: str | None = typer.Option(None, help="Model to use"),
) -> None:
    """Summarize Markdown text."""
    settings = _settings(model=model)
    target = _language(language)
    text = source.read()
    _run(yoyak_app.run_summarize(text, target, paragraphs=paragraphs, settings=settings))


@app.command()
def check(model: str | None = typer.Option(None, help="Model to check")) -> None:
    """Send a short request to the model to check the settings."""
    settings = _settings(model=model)
    reply = _run(yoyak_app.check_model(settings))
    typer.echo(f"{settings.model}: {reply}")


@config_app.command("show")
def config_show() -> None:
    """Print the effective settings."""
    settings = Settings()
    data = settings.model_dump()
    if data["api_key"]:
        data["api_key"] = data["api_key"][:4] + "…"
    typer.echo(f"# {settings_path()}")
    for key, value in data.items():
        typer.echo(f"{key} = {value!r}")


@config_app.command("set")
def config_set(
    model: str | None = typer.Option(None, help="Model to use by default"),
    api_key: str | None = typer.Option(None, help="API key for the model's endpoint"),
    base_url: str | None = typer.Option(None, help="OpenAI-compatible endpoint URL"),
    language: str | None = typer.Option(None, "--language", "-l", help="Default target language"),
    check_model: bool = typer.Option(True, "--check/--no-check", help="Check the model first"),
) -> None:
    """Store settings in the settings file."""
    if model is not None and not is_model_moniker(model) and base_url is None:
        known = ", ".join(sorted(MODELS))
        raise typer.BadParameter(
            f"unknown model {model!r}; known models: {known}", param_hint="--model"
        )
    overrides = {
        key: value
        for key, value in {
            "model": model,
            "api_key": api_key,
            "base_url": base_url,
            "language": _language(language),
        }.items()
        if value is not None
    }
    if check_model:
        settings = Settings(**overrides)
        reply = _run(yoyak_app.check_model(settings))
        typer.echo(f"{settings.model}: {reply}")
    # Only the file's own values and the options given here are written back;
    # YOYAK_* variables stay in the environment.
    stored = {**read_settings_file(), **overrides}
    path = save_settings(Settings(**stored), fields=stored)
    typer.echo(f"Saved settings to {path}")


if __name__ == "__main__":  # pragma: no cover
    app()
