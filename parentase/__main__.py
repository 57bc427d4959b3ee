from typing import Optional
from typing_extensions import Annotated

import typer
import sys

from parentase.pipeline import run_parental_ase

app = typer.Typer(pretty_exceptions_short=False)


@app.command()
def parental_ase(
    input_file: Annotated[str, typer.Argument(help="Raw strain counts CSV")],
    output_file: Annotated[str, typer.Argument(help="Output CSV")],
    policy: Annotated[
        str,
        typer.Option(
            "--policy",
            "-p",
            help=(
                "Imprinting classification. "
                "'signed': Paternally/Maternally Imprinted at |ratio| >= 0.7. "
                "'percent': Imprinted at |ratio| * 100 > 85"
            )
        )
    ] = "signed",
    threshold: Annotated[
        Optional[float],
        typer.Option("--threshold", "-t", help="Override the policy's threshold")
    ] = None,
    unmatched: Annotated[
        str,
        typer.Option(
            "--unmatched",
            help=(
                "Gene identifiers without a strain suffix: "
                "'raise', 'drop' or 'paternal'"
            )
        )
    ] = "raise",
    maternal_suffix: Annotated[
        str,
        typer.Option("--maternal-suffix", help="Maternal strain suffix")
    ] = "_129",
    paternal_suffix: Annotated[
        str,
        typer.Option("--paternal-suffix", help="Paternal strain suffix")
    ] = "_JF1",
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only report errors")
    ] = False,
) -> None:
    try:
        run_parental_ase(
            input_file,
            output_file,
            policy=policy,
            threshold=threshold,
            unmatched=unmatched,
            maternal_suffix=maternal_suffix,
            paternal_suffix=paternal_suffix,
            verbose=not quiet
        )
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=1)


def main() -> None:
    """Entry point for the parentase CLI."""
    app()


if __name__ == "__main__":
    main()
