from __future__ import annotations

from typing import Iterator, Optional
from pathlib import Path
import json
import os
import uuid

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
import httpx


app = typer.Typer()
console = Console()
trace_console = Console(stderr=True)

INFO_COMMANDS = {"/about": "about", "/privacy": "privacy", "/safety": "safety"}


def iter_events(resp: httpx.Response) -> Iterator[dict]:
    """Decode the ``data:`` lines of a server-sent event stream until ``[DONE]``."""
    for raw_line in resp.iter_lines():
        line = raw_line.strip() if raw_line else ""
        if not line.startswith("data:"):
            continue
        data = line[len("data:") :].strip()
        if data == "[DONE]":
            break
        try:
            yield json.loads(data)
        except json.JSONDecodeError:
            # Not JSON; ignore
            continue


def render_map(view: dict) -> None:
    if view.get("bounds") is None:
        trace_console.print("[map] default view", style="dim")
        return
    route = view.get("route") or []
    markers = view.get("markers") or []
    b = view["bounds"]
    trace_console.print(
        f"[map] {len(route)} route points, {len(markers)} markers, "
        f"bounds ({b['south']:.3f}, {b['west']:.3f}) - ({b['north']:.3f}, {b['east']:.3f})",
        style="dim",
    )


@app.command()
def chat(
    prompt_str: Optional[str] = typer.Option(None, "--prompt", help="Send one prompt, then keep chatting."),
    server: str = typer.Option(
        os.getenv("NAVIGATOR_URL", "http://localhost:3002"), "--server", help="Navigator service URL."
    ),
    session_id: Optional[str] = typer.Option(None, "--session", help="Resume an existing session id."),
    lat: Optional[float] = typer.Option(None, "--lat", help="Your latitude (omit to use the default location)."),
    lng: Optional[float] = typer.Option(None, "--lng", help="Your longitude."),
    output_file: Optional[Path] = typer.Option(None, "--output", "-o", help="Append itineraries to a Markdown file."),
) -> None:
    base = f"{server.rstrip('/')}/chat/{session_id or uuid.uuid4()}"
    position = {"lat": lat, "lng": lng} if lat is not None and lng is not None else None

    def save(md: str) -> None:
        if not output_file or not md:
            return
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with output_file.open("a", encoding="utf-8") as f:
                if f.tell() > 0:
                    f.write("\n\n---\n\n")
                f.write(md)
            console.print(f"\nSaved itinerary to {output_file}", style="green")
        except OSError as e:
            trace_console.print(f"Failed to write file: {e}", style="bold red")

    def run_once(one_prompt: str) -> str:
        latest = ""
        with console.status("Planning your trip..."):
            try:
                with httpx.stream(
                    "POST",
                    f"{base}/messages",
                    json={"prompt": one_prompt, "position": position},
                    headers={"Accept": "text/event-stream", "Content-Type": "application/json"},
                    timeout=120,
                ) as resp:
                    resp.raise_for_status()
                    for payload in iter_events(resp):
                        ptype = payload.get("type")
                        if ptype == "message":
                            message = payload.get("message") or {}
                            if message.get("role") == "assistant":
                                latest = message.get("content", "")
                                console.print(Markdown(latest))
                        elif ptype == "message_replaced":
                            latest = (payload.get("message") or {}).get("content", "")
                            console.print(Panel(Markdown(latest), title="With weather forecasts"))
                        elif ptype == "map":
                            render_map(payload.get("view") or {})
                        elif ptype == "status":
                            trace_console.print(payload.get("content", ""), style="dim")
                        elif ptype == "error":
                            trace_console.print(payload.get("content", "Unknown error"), style="bold red")
                        elif ptype == "rejected":
                            trace_console.print(f"Prompt not sent ({payload.get('reason')})", style="yellow")
            except httpx.HTTPError as e:
                trace_console.print(f"Request failed: {e}", style="bold red")
        return latest

    def show_info(topic: str) -> None:
        try:
            resp = httpx.get(f"{server.rstrip('/')}/info/{topic}", timeout=10)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            trace_console.print(f"Request failed: {e}", style="bold red")
            return
        page = resp.json()
        console.print(Panel(Markdown(page.get("content", "")), title=page.get("title")))

    def clear() -> None:
        try:
            resp = httpx.delete(f"{base}/messages", timeout=10)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            trace_console.print(f"Request failed: {e}", style="bold red")
            return
        messages = resp.json().get("messages") or []
        if messages:
            console.print(Markdown(messages[0].get("content", "")))

    def show_map() -> None:
        try:
            resp = httpx.get(f"{base}/map", timeout=10)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            trace_console.print(f"Request failed: {e}", style="bold red")
            return
        render_map(resp.json())

    try:
        welcome = httpx.get(base, timeout=10)
        welcome.raise_for_status()
        console.print(Markdown(welcome.json()["messages"][-1]["content"]))
    except httpx.HTTPError as e:
        trace_console.print(f"Could not reach the navigator service: {e}", style="bold red")
        raise typer.Exit(code=1)

    if prompt_str:
        save(run_once(prompt_str))

    while True:
        try:
            user_in = typer.prompt("Describe your trip (/clear, /map, /about, /privacy, /safety, exit)")
        except (EOFError, KeyboardInterrupt):
            break
        lower = user_in.strip().lower()
        if not lower:
            continue
        if lower in {"exit", "quit", "q"}:
            break
        if lower == "/clear":
            clear()
        elif lower == "/map":
            show_map()
        elif lower in INFO_COMMANDS:
            show_info(INFO_COMMANDS[lower])
        else:
            save(run_once(user_in.strip()))


if __name__ == "__main__":
    app()
