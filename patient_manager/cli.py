"""Interactive terminal client for the patient manager."""

import asyncio
import sys

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from patient_manager.config import AppConfig
from patient_manager.main import Application, build_application
from patient_manager.models.patient import Patient
from patient_manager.models.state import AppState, View
from patient_manager.services.auth import DemoIdentityProvider
from patient_manager.utils.logging import LogConfig, setup_logging

FORM_FIELDS = [
    ("name", "Name"),
    ("email", "Email"),
    ("address", "Address"),
    ("date_of_birth", "Date of birth (YYYY-MM-DD)"),
    ("registered_date", "Registered date (YYYY-MM-DD)"),
]


class PatientCLI:
    """Terminal renderer and event source for the application controller."""

    def __init__(self, application: Application, console: Console | None = None):
        """Initialize patient CLI."""
        self.application = application
        self.controller = application.controller
        self.console = console or Console()

    async def start(self) -> None:
        """Run the interactive session until the user quits."""
        self.console.print(
            Panel.fit(
                "[bold blue]🏥 Patient Management System[/bold blue]\n"
                f"Connected to {self.application.config.api_base_url}\n"
                "Commands: list, add, edit <n>, delete <n>, logout, help, quit",
                border_style="blue",
            )
        )

        try:
            if self.controller.current_session().is_authenticated:
                # Session restored from local storage
                await self.controller.dispatch("refresh")
                self._render()
            elif not await self._ensure_signed_in():
                return

            while True:
                command, _, argument = Prompt.ask("\n[bold cyan]Command[/bold cyan]").strip().partition(" ")
                command = command.lower()

                if command in ["quit", "exit", "/quit", "/exit"]:
                    break
                if command == "":
                    continue

                if not await self._handle(command, argument.strip()):
                    self.console.print(f"[red]Unknown command: {command}[/red] (type 'help')")
                    continue

                if not await self._ensure_signed_in():
                    break
        except (KeyboardInterrupt, EOFError):
            pass
        finally:
            self.console.print("\n[yellow]👋 Goodbye![/yellow]")
            await self.application.aclose()

    async def _ensure_signed_in(self) -> bool:
        """Log in if there is no session, then load the list. False if the user gave up."""
        if self.controller.current_session().is_authenticated:
            return True
        if not await self._login():
            return False
        await self.controller.dispatch("refresh")
        self._render()
        return True

    async def _handle(self, command: str, argument: str) -> bool:
        """Execute one command. Returns False for unknown commands."""
        if command == "help":
            self._show_help()
        elif command in ["list", "refresh"]:
            await self.controller.dispatch("refresh")
            self._render()
        elif command == "add":
            await self.controller.dispatch("add_patient")
            await self._run_form()
        elif command == "edit":
            patient = self._pick_patient(argument)
            if patient:
                await self.controller.dispatch("edit_patient", patient)
                await self._run_form()
        elif command == "delete":
            patient = self._pick_patient(argument)
            if patient and Confirm.ask(f"Are you sure you want to delete {patient.name}?"):
                await self.controller.dispatch("delete", patient.id)
                self._render()
        elif command == "logout":
            await self.controller.dispatch("logout")
            self.console.print("[yellow]🔒 Signed out[/yellow]")
        else:
            return False
        return True

    async def _login(self) -> bool:
        """Prompt for credentials until login succeeds or the user gives up."""
        self._show_demo_accounts()
        while True:
            email = Prompt.ask("[bold]Email[/bold]", default="")
            password = Prompt.ask("[bold]Password[/bold]", password=True, default="")

            self.console.print("[dim]Signing in...[/dim]")
            session = await self.controller.dispatch("login", {"email": email, "password": password})
            if session is not None:
                self.console.print(f"[green]✅ Welcome, {session.user.name}[/green]")
                return True

            self.console.print(f"[red]❌ {self.controller.current_state().error}[/red]")
            if not Confirm.ask("Try again?", default=True):
                return False

    async def _run_form(self) -> None:
        """Collect form input until the save succeeds or the user cancels."""
        state = self.controller.current_state()
        title = "Edit Patient" if state.view is View.EDIT else "Add New Patient"
        self.console.print(Panel.fit(f"[bold]{title}[/bold]", border_style="cyan"))

        while True:
            data = {}
            for field, label in FORM_FIELDS:
                error = state.form_errors.get(field)
                if error:
                    self.console.print(f"[red]{error}[/red]")
                data[field] = Prompt.ask(label, default=state.form_data.get(field, ""))

            self.console.print("[dim]Saving...[/dim]")
            saved = await self.controller.dispatch("submit", data)
            state = self.controller.current_state()

            if saved is not None:
                self.console.print(f"[green]✅ Saved {saved.name}[/green]")
                self._render()
                return
            if state.view is View.LIST:
                # Session expired during the save
                self.console.print(f"[red]❌ {state.error}[/red]")
                return
            if state.error:
                self.console.print(f"[red]❌ {state.error}[/red]")
            if not Confirm.ask("Edit and retry?", default=True):
                await self.controller.dispatch("cancel")
                return

    def _pick_patient(self, argument: str) -> Patient | None:
        """Resolve a 1-based row number from the last rendered table."""
        patients = self.controller.current_state().patients
        if not argument.isdigit() or not 1 <= int(argument) <= len(patients):
            self.console.print(f"[red]Pick a row number between 1 and {len(patients)}[/red]")
            return None
        return patients[int(argument) - 1]

    def _render(self) -> None:
        """Render the patient list and any pending error."""
        state = self.controller.current_state()
        if state.error:
            self.console.print(Panel(state.error, title="[red]Error[/red]", border_style="red"))
            self.controller.dismiss_error()
        self.console.print(build_patient_table(state))

    def _show_demo_accounts(self) -> None:
        """Show the demo credentials."""
        accounts = "\n".join(
            f"• {identity.email} / {identity.password} ({identity.user.role})"
            for identity in DemoIdentityProvider.DEMO_IDENTITIES
        )
        self.console.print(
            Panel(
                f"[bold]Demo Accounts:[/bold]\n\n{accounts}",
                title="[yellow]🔑 Sign In[/yellow]",
                border_style="yellow",
            )
        )

    def _show_help(self) -> None:
        """Show help information."""
        help_text = """
[bold]Available Commands:[/bold]
• list - Reload and show all patients
• add - Add a new patient
• edit <n> - Edit the patient in row n
• delete <n> - Delete the patient in row n
• logout - Sign out
• quit or exit - Exit the client

[bold]Tips:[/bold]
• Dates use the YYYY-MM-DD format (e.g., 1980-01-01)
• Press Enter on a form prompt to keep the shown value
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]❓ Help[/cyan]", border_style="cyan"))


def build_patient_table(state: AppState) -> Table | str:
    """Build the patient list table, or the empty-list hint."""
    if not state.patients:
        return "[dim]No patients found. Add a new patient to get started.[/dim]"

    table = Table(title="Patient List", header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Address")
    table.add_column("Date of Birth")
    table.add_column("Registered Date")

    for index, patient in enumerate(state.patients, start=1):
        table.add_row(
            str(index),
            patient.name,
            patient.email,
            patient.address,
            patient.date_of_birth,
            patient.registered_date,
        )
    return table


def main():
    """Main entry point for the patient CLI."""
    config = AppConfig.from_env()
    if len(sys.argv) > 1:
        config = config.model_copy(update={"api_base_url": sys.argv[1].rstrip("/")})

    # The console belongs to the UI; diagnostics go to stderr
    setup_logging(LogConfig(level=config.log_level, stream="stderr"))
    cli = PatientCLI(build_application(config))
    asyncio.run(cli.start())


if __name__ == "__main__":
    main()
