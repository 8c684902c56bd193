"""Module entry point for `python -m ssm.cli`."""

if __name__ == "__main__":  # pragma: no cover (invocation driven)
    from ssm.cli import cli

    cli()
