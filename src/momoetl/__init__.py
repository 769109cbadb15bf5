"""momoetl - load mobile-money SMS exports into a relational ledger."""


# Import main lazily so importing the domain layer never pulls in click
def __getattr__(name):
    if name == "main":
        from momoetl.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
