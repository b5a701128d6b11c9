"""
CLI entry point, when used as a module: `python -m gaas`.

Useful for debugging in the IDEs (use the start-mode "Module", module "gaas").
"""
from gaas import cli

if __name__ == '__main__':
    cli.main()
