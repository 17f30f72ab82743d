#!/usr/bin/env python3
"""Interactive chat CLI for the colleague streaming service."""

import json
import sys

import httpx
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt


class ChatCLI:
    """Interactive chat interface that consumes the SSE endpoints."""

    def __init__(self, base_url: str = "http://localhost:8000"):
        """Initialize chat CLI."""
        self.base_url = base_url
        self.conversation_id: str | None = None
        self.console = Console()
        self.client = httpx.Client(timeout=httpx.Timeout(10.0, read=300.0))

    def start(self) -> None:
        """Start the interactive chat session."""
        self.console.print(
            Panel.fit(
                "[bold blue]Colleague - Interactive Chat[/bold blue]\n"
                "Type your messages to chat with your AI colleague.\n"
                "Commands: /help, /new, /quit",
                border_style="blue",
            )
        )

        if not self._test_connection():
            self.console.print(f"[red]Cannot connect to the service at {self.base_url}.[/red]")
            return

        self.console.print("[green]Connected to colleague service[/green]\n")

        if not self._new_conversation():
            return

        try:
            while True:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")

                if user_input.lower() in ["/quit", "/exit", "quit", "exit"]:
                    break
                elif user_input.lower() == "/help":
                    self._show_help()
                    continue
                elif user_input.lower() == "/new":
                    self._end_conversation()
                    self._new_conversation()
                    continue
                elif user_input.strip() == "":
                    continue

                self._stream(
                    "/chat/stream",
                    {"conversationId": self.conversation_id, "content": user_input},
                )

        except KeyboardInterrupt:
            pass
        finally:
            self._end_conversation()
            self.console.print("\n[yellow]Goodbye![/yellow]")
            self.client.close()

    def _test_connection(self) -> bool:
        """Test connection to the service."""
        try:
            response = self.client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _new_conversation(self) -> bool:
        response = self.client.post(f"{self.base_url}/conversations", json={})
        if response.status_code != 201:
            self.console.print(f"[red]API Error: {response.status_code} - {response.text}[/red]")
            return False
        self.conversation_id = response.json()["id"]
        self.console.print(f"[dim]Conversation {self.conversation_id}[/dim]")
        return True

    def _end_conversation(self) -> None:
        if self.conversation_id:
            try:
                self.client.post(f"{self.base_url}/conversations/{self.conversation_id}/end")
            except httpx.HTTPError:
                pass
            self.conversation_id = None

    def _stream(self, path: str, payload: dict) -> None:
        """Post a request and render the SSE events it produces."""
        pending_approval: dict | None = None
        reply = ""

        try:
            with self.client.stream("POST", f"{self.base_url}{path}", json=payload) as response:
                if response.status_code != 200:
                    response.read()
                    self.console.print(f"[red]API Error: {response.status_code} - {response.text}[/red]")
                    return

                for line in response.iter_lines():
                    if not line.startswith("data: "):
                        continue
                    event = json.loads(line[len("data: ") :])
                    event_type = event.get("type")

                    if event_type == "content":
                        reply += event["data"]
                        self.console.print(event["data"], end="", markup=False, highlight=False)
                    elif event_type == "tool_result":
                        self._show_tool_result(event["toolResult"])
                    elif event_type == "tool_approval":
                        pending_approval = event["toolApproval"]
                    elif event_type == "warning":
                        self.console.print(f"\n[yellow]Warning: {event['data']}[/yellow]")
                    elif event_type == "error":
                        self.console.print(f"\n[red]Error: {event['data']}[/red]")
                    elif event_type == "done" and reply:
                        self.console.print()
                        self.console.print(
                            Panel(
                                Markdown(reply),
                                title="[bold green]Colleague[/bold green]",
                                border_style="green",
                                padding=(1, 2),
                            )
                        )

        except httpx.HTTPError as e:
            self.console.print(f"[red]Connection error: {e}[/red]")
            return

        if pending_approval is not None:
            self._ask_approval(pending_approval)

    def _show_tool_result(self, result: dict) -> None:
        status = "[green]ok[/green]" if result.get("success") else f"[red]failed: {result.get('error')}[/red]"
        self.console.print(f"\n[dim]tool {result.get('toolName')}[/dim] {status}")

    def _ask_approval(self, approval: dict) -> None:
        """Show a pending tool call and send the user's decision."""
        self.console.print()
        self.console.print(
            Panel(
                f"{approval['reason']}\n\n[bold]Input:[/bold]\n{json.dumps(approval['toolInput'], indent=2)}",
                title=f"[yellow]Approve {approval['toolName']}? (risk {approval['riskLevel']})[/yellow]",
                border_style="yellow",
            )
        )
        approved = Confirm.ask("Run this tool?", default=False)
        self._stream(
            "/chat/stream/approval",
            {"approvalId": approval["id"], "approved": approved, "conversationId": self.conversation_id},
        )

    def _show_help(self) -> None:
        """Show help information."""
        help_text = """
[bold]Available Commands:[/bold]
• /help - Show this help message
• /new - End this conversation and start a new one
• /quit or /exit - Exit the chat

[bold]Things to try:[/bold]
1. "What files are in the current directory?"
2. "Write a haiku to haiku.txt"
3. "Run `git status` for me"

[bold]Tips:[/bold]
• Reading and listing files runs immediately
• Writing files and running commands ask for your confirmation first
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the chat CLI."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

    chat = ChatCLI(base_url)
    chat.start()


if __name__ == "__main__":
    main()
