from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .api import RelayClient
from .capture import CaptureProvider, ScreenshotTaker
from .config import RelayConfig, RunConfig, ScreenshotConfig, SpeechConfig, default_relay_url
from .models import MAX_SPEED, MIN_SPEED, VOICES, Provider
from .render import render_markdown_terminal
from .service import CaptureOrchestrator, MessageKind

console = Console(highlight=False)
app = typer.Typer(help="Capture or load a screenshot, describe it with a vision model, and read it aloud.")

_STYLES: dict[MessageKind, str] = {"info": "cyan", "success": "green", "error": "bold red"}


def entrypoint() -> None:
    app()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


@app.command()
def capture(
    file: Annotated[Path | None, typer.Option("--file", "-f", help="Analyze this image file instead of the screen.")] = None,
    clipboard: Annotated[bool, typer.Option("--clipboard", help="Analyze the image currently on the clipboard.")] = False,
    monitor: Annotated[int | None, typer.Option(help="Monitor index (0 = all displays).")] = None,
    output: Annotated[Path | None, typer.Option(help="Save the captured screenshot PNG to this path.")] = None,
    provider: Annotated[Provider, typer.Option(case_sensitive=False, help="Analysis provider.")] = Provider.OPENAI,
    prompt: Annotated[str | None, typer.Option(help="Replace the default analysis instruction.")] = None,
    relay_url: Annotated[str | None, typer.Option(help="Base URL of the SnapSight relay.")] = None,
    voice: Annotated[str, typer.Option(help=f"Speech voice ({', '.join(VOICES)}).")] = "nova",
    speed: Annotated[float, typer.Option(help="Speech speed.", min=MIN_SPEED, max=MAX_SPEED)] = 1.0,
    no_audio: Annotated[bool, typer.Option("--no-audio", help="Skip speech synthesis.")] = False,
    save_markdown: Annotated[Path | None, typer.Option(help="Write the analysis markdown to this path.")] = None,
    save_audio: Annotated[Path | None, typer.Option(help="Write the synthesized mp3 to this path.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Emit machine-readable JSON only.")] = False,
) -> None:
    if file is not None and clipboard:
        raise typer.BadParameter("Use either --file or --clipboard, not both.")
    voice_choice = voice.lower()
    if voice_choice not in VOICES:
        raise typer.BadParameter(f"Voice must be one of {', '.join(VOICES)}.")
    run_cfg = RunConfig(
        screenshot=ScreenshotConfig(monitor=monitor, output_path=output),
        relay=RelayConfig(base_url=relay_url or default_relay_url(), provider=provider, prompt=prompt),
        speech=SpeechConfig(enabled=not no_audio, voice=voice_choice, speed=speed),  # type: ignore[arg-type]
        image_file=file,
        from_clipboard=clipboard,
        markdown_path=save_markdown,
        audio_path=save_audio,
        json_output=json_output,
    )
    ok = asyncio.run(_run_cli(run_cfg))
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port to listen on.")] = 8000,
    reload: Annotated[bool, typer.Option(help="Reload on source changes.")] = False,
) -> None:
    """Run the relay endpoints with uvicorn."""
    import uvicorn

    uvicorn.run("server.app:app", host=host, port=port, reload=reload)


async def _run_cli(config: RunConfig) -> bool:
    notify = _silent if config.json_output else _print_message
    provider = CaptureProvider(ScreenshotTaker(config.screenshot))
    async with RelayClient(config.relay) as relay:
        orchestrator = CaptureOrchestrator(
            provider,
            relay,
            speech=config.speech,
            provider=config.relay.provider,
            prompt=config.relay.prompt,
            notify=notify,
        )
        if config.image_file is not None:
            await orchestrator.load_file(config.image_file)
        elif config.from_clipboard:
            await orchestrator.paste_from_clipboard()
        else:
            await orchestrator.capture_screen()

        if not orchestrator.state.is_previewing:
            _report_failure(orchestrator, config)
            return False

        result = await orchestrator.analyze()
        if result is None or not result.success:
            _report_failure(orchestrator, config)
            return False

        audio_url = await orchestrator.wait_for_synthesis()

    markdown_path = orchestrator.download_markdown(config.markdown_path) if config.markdown_path else None
    audio_path = orchestrator.save_audio(config.audio_path) if config.audio_path else None

    if config.json_output:
        payload = {
            "state": orchestrator.state.to_dict(),
            "html": orchestrator.rendered_html,
            "audio": bool(audio_url),
            "markdownPath": str(markdown_path) if markdown_path else None,
            "audioPath": str(audio_path) if audio_path else None,
        }
        typer.echo(json.dumps(payload, indent=2))
        return True

    if result.markdown:
        console.print(render_markdown_terminal(result.markdown))
    _print_summary(orchestrator, markdown_path, audio_path)
    return True


def _print_message(message: str, kind: MessageKind) -> None:
    console.print(f"[{_STYLES[kind]}]{message}[/]")


def _silent(message: str, kind: MessageKind) -> None:
    return None


def _report_failure(orchestrator: CaptureOrchestrator, config: RunConfig) -> None:
    error = orchestrator.state.error or "No image to analyze."
    if config.json_output:
        typer.echo(json.dumps({"state": orchestrator.state.to_dict(), "error": error}, indent=2))
    else:
        console.print(f"[bold red]Error:[/] {error}")


def _print_summary(orchestrator: CaptureOrchestrator, markdown_path: Path | None, audio_path: Path | None) -> None:
    analysis = orchestrator.state.analysis
    table = Table(title="SnapSight run", show_edge=False, box=None)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value", overflow="fold")
    table.add_row("Provider", (analysis.provider if analysis else None) or orchestrator.provider.value)
    if analysis and analysis.timestamp:
        table.add_row("Timestamp", analysis.timestamp.isoformat())
    table.add_row("Audio", "ready" if orchestrator.audio_url else "not generated")
    if markdown_path:
        table.add_row("Markdown", str(markdown_path))
    if audio_path:
        table.add_row("Audio file", str(audio_path))
    console.print(table)
