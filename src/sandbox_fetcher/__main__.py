from sandbox_fetcher.interfaces.cli.main import entry_point

entry_point()
