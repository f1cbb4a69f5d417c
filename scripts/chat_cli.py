#!/usr/bin/env python3
"""Interactive chat CLI for trying the voice bridge without a microphone.

Usage:
    chat_cli.py [base_url]    stream through a running completions shim
    chat_cli.py --local       run the orchestrator in-process, typed text as transcripts
"""

import asyncio
import json
import sys
from typing import Any

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from voice_bridge.config import VoiceLLMMode, load_settings
from voice_bridge.models.voice import ToolErrorMessage, ToolResponseMessage
from voice_bridge.services.color_box import ColorBox
from voice_bridge.services.llm import LLMConversation
from voice_bridge.services.orchestrator import VoiceOrchestrator
from voice_bridge.services.voice_session import ConnectionStatus, connect_voice_session
from voice_bridge.tools.base import ToolContext
from voice_bridge.tools.registry import get_tools_registry
from voice_bridge.utils.logging import LogConfig, setup_logging


class ConsoleVoiceSession:
    """Voice session stand-in that prints what would be spoken."""

    def __init__(self, console: Console):
        self.console = console
        self.status = ConnectionStatus.DISCONNECTED
        self.is_muted = False
        self.assistant_paused = False

    async def connect(
        self, api_key: str, config_id: str | None = None, tools: list[dict[str, Any]] | None = None
    ) -> None:
        names = ", ".join(tool["name"] for tool in tools or []) or "none"
        self.console.print(f"[dim]Voice session config: {config_id or 'default'}, tools: {names}[/dim]")
        self.status = ConnectionStatus.CONNECTED

    async def disconnect(self) -> None:
        self.status = ConnectionStatus.DISCONNECTED

    def mute(self) -> None:
        self.is_muted = True

    def unmute(self) -> None:
        self.is_muted = False

    def send_assistant_input(self, text: str) -> None:
        self.console.print(Panel(text, title="[bold green]🔊 Assistant[/bold green]", border_style="green"))

    def pause_assistant(self) -> None:
        self.assistant_paused = True

    def resume_assistant(self) -> None:
        self.assistant_paused = False

    def send_tool_message(self, message: ToolResponseMessage | ToolErrorMessage) -> None:
        self.console.print(f"[dim]{message.type}: {message.content}[/dim]")


class ChatCLI:
    """Interactive chat interface for the voice bridge."""

    def __init__(self, base_url: str = "http://localhost:8000"):
        """Initialize chat CLI."""
        self.base_url = base_url
        self.console = Console()
        self.messages: list[dict[str, str]] = []
        self.box = ColorBox()
        self.cleared = False

    def start(self, local: bool = False) -> None:
        """Start the interactive chat session."""
        mode = "local orchestrator" if local else f"completions shim at {self.base_url}"
        self.console.print(
            Panel.fit(
                "[bold blue]🎙️ Voice Bridge - Interactive Chat[/bold blue]\n"
                f"Talking to the {mode}.\n"
                'Try "make the box blue". Commands: /box, /clear, /quit',
                border_style="blue",
            )
        )

        try:
            if local:
                asyncio.run(self._run_local())
            else:
                self._run_shim()
        except KeyboardInterrupt:
            pass
        finally:
            self.console.print("\n[yellow]👋 Goodbye![/yellow]")

    def _prompt(self) -> str | None:
        """Read one line; None means quit, empty string means skip."""
        user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
        command = user_input.strip().lower()

        if command in ("/quit", "/exit", "quit", "exit"):
            return None
        if command == "/box":
            self._show_box()
            return ""
        if command == "/clear":
            self.messages = []
            self.cleared = True
            self.console.print("[yellow]🔄 Conversation cleared[/yellow]")
            return ""
        return user_input.strip()

    def _show_box(self) -> None:
        self.console.print(
            Panel(
                f"[bold]{self.box.color.upper()}[/bold]\n"
                f"last command: {self.box.last_command or '-'}, tool calls: {self.box.tool_call_count}",
                title="[bold]Color Box[/bold]",
                border_style=self.box.color,
            )
        )

    async def _run_local(self) -> None:
        voice = ConsoleVoiceSession(self.console)
        tools_registry = get_tools_registry()
        await connect_voice_session(voice, load_settings(), tools_registry, mode=VoiceLLMMode.ORCHESTRATED)

        context = ToolContext()
        context.register_color_handler(self.box.change_color)
        orchestrator = VoiceOrchestrator(
            voice,
            LLMConversation(tools_registry=tools_registry),
            context,
            tools_registry,
            on_tool_executed=self._print_tool_call,
            on_error=lambda error: self.console.print(f"[red]❌ {error}[/red]"),
        )

        while (user_input := self._prompt()) is not None:
            if self.cleared:
                orchestrator.reset()
                self.cleared = False
            if not user_input:
                continue
            self.console.print("[dim]💭 Thinking...[/dim]")
            await orchestrator.handle_transcript(user_input)

    def _run_shim(self) -> None:
        with httpx.Client(timeout=60.0) as client:
            if not self._test_connection(client):
                self.console.print(f"[red]❌ Cannot connect to the service at {self.base_url}.[/red]")
                return

            self.console.print("[green]✅ Connected to voice bridge[/green]")

            while (user_input := self._prompt()) is not None:
                if not user_input:
                    continue
                self.messages.append({"role": "user", "content": user_input})
                reply = self._stream_completion(client)
                if reply:
                    self.messages.append({"role": "assistant", "content": reply})

    def _test_connection(self, client: httpx.Client) -> bool:
        """Test connection to the service."""
        try:
            response = client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _stream_completion(self, client: httpx.Client) -> str | None:
        """Stream one completion, printing text and applying tool calls as they arrive."""
        payload = {"model": "voice-bridge", "messages": self.messages, "stream": True}
        reply = ""

        try:
            with client.stream("POST", f"{self.base_url}/api/chat/completions", json=payload) as response:
                if response.status_code != 200:
                    response.read()
                    self.console.print(f"[red]❌ API Error: {response.status_code} - {response.text}[/red]")
                    return None

                self.console.print("[bold green]🤖[/bold green] ", end="")
                for line in response.iter_lines():
                    if not line.startswith("data: "):
                        continue
                    data = line.removeprefix("data: ")
                    if data == "[DONE]":
                        break

                    delta = json.loads(data)["choices"][0]["delta"]
                    if delta.get("content"):
                        reply += delta["content"]
                        self.console.print(delta["content"], end="")
                    for tool_call in delta.get("tool_calls", []):
                        self._apply_tool_call(tool_call)
                self.console.print()

        except httpx.HTTPError as e:
            self.console.print(f"[red]❌ Connection error: {e}[/red]")
            return None

        return reply

    def _print_tool_call(self, name: str, arguments: dict, result: str) -> None:
        self.console.print(f"[magenta]🔧 {name} {arguments} → {result}[/magenta]")

    def _apply_tool_call(self, tool_call: dict) -> None:
        function = tool_call["function"]
        arguments = json.loads(function["arguments"])
        self.console.print(f"\n[magenta]🔧 {function['name']} {arguments}[/magenta]")
        if function["name"] == "change_box_color" and "color" in arguments:
            self.box.change_color(arguments["color"])


def main():
    """Main entry point for the chat CLI."""
    setup_logging(LogConfig(level="WARNING"))

    args = sys.argv[1:]
    local = "--local" in args
    positional = [arg for arg in args if not arg.startswith("--")]
    base_url = positional[0] if positional else "http://localhost:8000"

    chat = ChatCLI(base_url)
    chat.start(local=local)


if __name__ == "__main__":
    main()
