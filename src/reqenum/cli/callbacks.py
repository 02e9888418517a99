import typer


def chunk_size_callback(ctx: typer.Context, value: int | None):
    if ctx.resilient_parsing:
        return
    if value is not None and value < 1:
        raise typer.BadParameter(
            message=f"chunk size must be at least 1, got {value}",
            param_hint="--chunk-size, -c",
        )
    return value


def header_callback(ctx: typer.Context, value: list[str] | None):
    if ctx.resilient_parsing:
        return
    for header in value or []:
        name, separator, _ = header.partition(":")
        if not separator or not name.strip():
            raise typer.BadParameter(
                message=f"'{header}' is not a valid header, expected 'Name: value'",
                param_hint="--header, -H",
            )
    return value
