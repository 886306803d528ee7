"""Category management commands."""

import click
from budgetwatch.cli.error_handling import handle_domain_error
from budgetwatch.domain.category import CategoryService
from budgetwatch.domain.entities import CategoryIcon, DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_ICON
from budgetwatch.domain.errors import DomainError
from budgetwatch.domain.summary import budget_usage_percent
from budgetwatch.utils.amount_parser import parse_amount

ICON_CHOICES = click.Choice([icon.value for icon in CategoryIcon], case_sensitive=False)


def _parse_budget(ctx, budget: str):
    try:
        return parse_amount(budget)
    except ValueError as e:
        click.echo(f"Error: Invalid budget: {e}", err=True)
        ctx.exit(1)


def _icon_from_choice(value: str) -> CategoryIcon:
    # click.Choice with case_sensitive=False returns the canonical spelling
    return CategoryIcon(value)


@click.group()
def category_group():
    """Manage budget categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List categories with budget usage."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories(ctx.obj["owner"])
    if not categories:
        click.echo("No categories found. Run 'category presets' to create default categories.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<24} {'Spent':>12} {'Budget':>12} {'Used':>7}  Icon")
    click.echo("-" * 80)
    for cat in categories:
        used = f"{budget_usage_percent(cat):.0f}%"
        click.echo(
            f"{cat.id:<6} {cat.name[:24]:<24} {f'${cat.spent:,.2f}':>12} "
            f"{f'${cat.budget:,.2f}':>12} {used:>7}  {cat.icon.value}"
        )


@category_group.command("create")
@click.argument("name")
@click.option("--budget", required=True, help="Monthly budget (e.g., 500 or 1,200.00)")
@click.option("--color", default=DEFAULT_CATEGORY_COLOR, show_default=True, help="Hex display color")
@click.option("--icon", type=ICON_CHOICES, default=DEFAULT_CATEGORY_ICON.value, show_default=True)
@click.pass_context
def create_category(ctx, name: str, budget: str, color: str, icon: str):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)
    budget_amount = _parse_budget(ctx, budget)

    try:
        category_id = service.create_category(
            owner_id=ctx.obj["owner"],
            name=name,
            budget=budget_amount,
            color=color,
            icon=_icon_from_choice(icon),
        )
        click.echo(f"Created category '{name.strip()}' (ID: {category_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("update")
@click.argument("category")
@click.option("--name", help="New category name")
@click.option("--budget", help="New monthly budget")
@click.option("--color", help="New hex display color")
@click.option("--icon", type=ICON_CHOICES, help="New icon")
@click.pass_context
def update_category(ctx, category: str, name: str | None, budget: str | None, color: str | None, icon: str | None):
    """Update a category by name or ID.

    Examples:
        budgetwatch category update Shopping --budget 250
        budgetwatch category update 3 --name "Eating Out" --icon Coffee
    """
    db = ctx.obj["db"]
    service = CategoryService(db)
    owner = ctx.obj["owner"]
    budget_amount = _parse_budget(ctx, budget) if budget is not None else None

    try:
        cat = service.resolve_category(owner, category)
        service.update_category(
            owner,
            cat.id,
            name=name,
            budget=budget_amount,
            color=color,
            icon=_icon_from_choice(icon) if icon is not None else None,
        )
        click.echo(f"Updated category {cat.id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_category(ctx, category: str, yes: bool):
    """Delete a category by name or ID.

    Its transactions are kept and become uncategorized.
    """
    db = ctx.obj["db"]
    service = CategoryService(db)
    owner = ctx.obj["owner"]

    try:
        cat = service.resolve_category(owner, category)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not yes and not click.confirm(f"Are you sure you want to delete category '{cat.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_category(owner, cat.id)
        click.echo(f"Deleted category '{cat.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("presets")
@click.pass_context
def add_presets(ctx):
    """Create the default set of categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    created = service.add_preset_categories(ctx.obj["owner"])
    if not created:
        click.echo("Preset categories already exist.")
        return
    click.echo(f"Created {len(created)} preset categories.")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
