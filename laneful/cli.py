"""
Laneful CLI

Send email and work with webhook payloads from the terminal.
"""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from laneful import __version__, json_utils
from laneful.client import LanefulClient
from laneful.exceptions import LanefulException, WebhookPayloadError
from laneful.logger import setup_logging
from laneful.models import Email
from laneful.webhooks import (
    generate_signature,
    generate_test_batch_payload,
    generate_test_payload,
    parse_webhook_payload,
    verify_signature,
)

console = Console()


def _read_payload(path: Path) -> str:
    # Read bytes so line endings reach the HMAC exactly as stored
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        console.print(f"[red]Error:[/red] {path.name} is not valid UTF-8 ({e.reason} at byte {e.start})")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--base-url',
    envvar='LANEFUL_BASE_URL',
    help='API endpoint URL (or set LANEFUL_BASE_URL env var)'
)
@click.option(
    '--auth-token',
    envvar='LANEFUL_AUTH_TOKEN',
    help='API token (or set LANEFUL_AUTH_TOKEN env var)'
)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, base_url, auth_token, verbose):
    """
    Laneful CLI - send email and verify webhooks.

    Examples:

      # Send an email
      laneful send --from me@example.com --to you@example.com --subject Hi --text Hello

      # Sign a webhook payload file
      laneful webhook sign payload.json

      # Parse a webhook payload file
      laneful webhook parse payload.json
    """
    setup_logging(level="DEBUG" if verbose else "WARNING")
    ctx.ensure_object(dict)
    ctx.obj['base_url'] = base_url
    ctx.obj['auth_token'] = auth_token


@cli.command()
@click.option('--from', 'from_email', required=True, help='Sender address')
@click.option('--from-name', help='Sender display name')
@click.option('--to', 'to_emails', multiple=True, required=True, help='Recipient (repeatable)')
@click.option('--subject', required=True, help='Subject line')
@click.option('--text', 'text_content', help='Plain-text body')
@click.option('--html', 'html_content', help='HTML body')
@click.option('--tag', help='Tag attached to the message')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_context
def send(ctx, from_email, from_name, to_emails, subject, text_content, html_content, tag, output_json):
    """
    Send a single email.

    Example:
        laneful send --from me@example.com --to you@example.com --subject Hi --text Hello
    """
    try:
        builder = (
            Email.builder()
            .from_address(from_email, from_name)
            .subject(subject)
            .text_content(text_content)
            .html_content(html_content)
            .tag(tag)
        )
        for to_email in to_emails:
            builder.to(to_email)
        email = builder.build()

        with LanefulClient(ctx.obj['base_url'], ctx.obj['auth_token']) as client:
            with console.status(f"[bold green]Sending to {len(to_emails)} recipient(s)..."):
                result = client.send_email(email)
    except LanefulException as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if output_json:
        console.print_json(json_utils.dumps(result))
    else:
        console.print("✅ [green]Email sent successfully[/green]")
        for key, value in result.items():
            console.print(f"   {key}: {value}")


@cli.group()
@click.option(
    '--secret',
    envvar='LANEFUL_WEBHOOK_SECRET',
    help='Webhook secret (or set LANEFUL_WEBHOOK_SECRET env var)'
)
@click.pass_context
def webhook(ctx, secret):
    """Sign, verify and inspect webhook payloads."""
    ctx.obj['secret'] = secret


def _require_secret(ctx) -> str:
    secret = ctx.obj.get('secret')
    if not secret or not secret.strip():
        console.print("[red]Error:[/red] Webhook secret required")
        console.print("\n[yellow]Tip:[/yellow] export LANEFUL_WEBHOOK_SECRET='your-secret'")
        sys.exit(1)
    return secret


@webhook.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--prefix/--no-prefix', default=True, help='Prepend sha256= to the signature')
@click.pass_context
def sign(ctx, file, prefix):
    """
    Print the signature of a payload file.

    Example:
        laneful webhook sign payload.json
    """
    secret = _require_secret(ctx)
    click.echo(generate_signature(secret, _read_payload(file), include_prefix=prefix))


@webhook.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--signature', '-s', required=True, help='Signature header value')
@click.pass_context
def verify(ctx, file, signature):
    """
    Check a signature against a payload file. Exits 1 when it does not match.

    Example:
        laneful webhook verify payload.json -s sha256=...
    """
    secret = _require_secret(ctx)
    if verify_signature(secret, _read_payload(file), signature):
        console.print("✅ [green]Signature is valid[/green]")
    else:
        console.print("❌ [red]Signature is invalid[/red]")
        sys.exit(1)


@webhook.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
def parse(file, output_json):
    """
    Validate a payload file and list its events.

    Example:
        laneful webhook parse payload.json
    """
    try:
        batch = parse_webhook_payload(_read_payload(file))
    except WebhookPayloadError as e:
        console.print(f"[red]Invalid payload:[/red] {e}")
        sys.exit(1)

    if output_json:
        console.print_json(json_utils.dumps({
            "is_batch": batch.is_batch,
            "events": [event.to_dict() for event in batch.events],
        }))
        return

    table = Table(title=f"Webhook events ({batch.mode} mode)")
    table.add_column("Event", style="cyan")
    table.add_column("Email", style="green")
    table.add_column("Message ID")
    table.add_column("Timestamp", style="yellow")
    table.add_column("Tag")

    for event in batch.events:
        table.add_row(
            event.event_type,
            event.email,
            str(event.message_id),
            str(event.timestamp),
            str(event.get("tag", "")),
        )

    console.print(table)
    console.print(f"\n[cyan]{len(batch)} event(s)[/cyan]")


@webhook.command()
@click.option('--batch', 'as_batch', is_flag=True, help='Generate a batch (array) payload')
def sample(as_batch):
    """Print a sample webhook payload."""
    click.echo(generate_test_batch_payload() if as_batch else generate_test_payload())


if __name__ == '__main__':
    cli(obj={})
