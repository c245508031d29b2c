"""Flask CLI commands for admin and data-repair operations."""
import click


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (use `flask db upgrade` in production)."""
        from printmarket.extensions import db

        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("reconcile-links")
    @click.option("--actor-id", type=int, default=None, help="Admin id recorded in the audit log")
    def reconcile_links(actor_id):
        """Repair design links and apply decisions that never reached linked products."""
        from printmarket.services import link_service

        result = link_service.reconcile(actor_id=actor_id)
        click.echo(f"Links created: {result['created']}")
        click.echo(f"Stale or orphaned links deleted: {result['deleted']}")
        click.echo(f"Products given their design's decision: {result['cascaded']}")

    @app.cli.command("link-stats")
    def link_stats():
        """Show design link coverage."""
        from printmarket.services import link_service

        for key, value in link_service.link_stats().items():
            click.echo(f"  {key}: {value}")

    @app.cli.command("decide")
    @click.argument("design_id", type=int)
    @click.argument("decision", type=click.Choice(["VALIDATE", "REJECT"]))
    @click.option("--reason", default=None)
    @click.option("--actor-id", type=int, required=True)
    def decide(design_id, decision, reason, actor_id):
        """Validate or reject a pending design from the shell."""
        from printmarket.errors import PrintmarketError
        from printmarket.services import cascade_service

        try:
            result = cascade_service.decide(design_id, decision, reason=reason, actor_id=actor_id)
        except (PrintmarketError, ValueError) as e:
            raise click.ClickException(str(e))
        click.echo(
            f"Design {design_id} → {result.design.validation_state}; "
            f"{len(result.updated_product_ids)} products updated"
        )

    @app.cli.command("stats")
    def stats():
        """Show product statistics."""
        from printmarket.services.vendor_product_service import get_stats

        s = get_stats()
        total = sum(s.values())
        click.echo(f"Total products: {total}")
        for status, count in sorted(s.items()):
            click.echo(f"  {status}: {count}")
