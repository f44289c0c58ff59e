from release_gate.cli import cli

cli()
