"""Click subcommands registered on the ``flakelint`` group."""
