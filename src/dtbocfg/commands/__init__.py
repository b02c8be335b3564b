"""Command plumbing for dtbo-config.

Commands are selected by flags on a single Click command rather than by
subcommands; :mod:`dtbocfg.commands._base` records them in command-line
order and :mod:`dtbocfg.commands.dispatch` runs them.
"""
