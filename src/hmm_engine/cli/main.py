"""
Main CLI application for the HMM engine.

Trains a discrete HMM on a whitespace-separated observation sequence and shows
the learned parameters, the log-likelihood trace and the Viterbi path.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from .. import __version__
from ..config import get_config, load_config_file
from ..decode import decode
from ..hmm import create_model
from ..logger import get_logger, set_log_level
from ..train import BaumWelchTrainer
from ..vocabulary import Vocabulary, state_labels
from .display import history_table, matrix_table, vector_table
from .errors import EXIT_CODES, handle_cli_error, validate_observation_text

console = Console()
logger = get_logger(__name__)

app = typer.Typer(
    name="hmm-engine",
    help="Discrete Hidden Markov Model training (Baum-Welch) and Viterbi decoding",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True
)


@app.command("fit")
def fit(
    ctx: typer.Context,
    observations: str = typer.Argument(
        ...,
        help='Whitespace-separated observation symbols, e.g. "W H H W H"'
    ),
    n_states: Optional[int] = typer.Option(
        None,
        "--states",
        "-s",
        help="Number of hidden states"
    ),
    max_iterations: Optional[int] = typer.Option(
        None,
        "--max-iter",
        "-i",
        help="Maximum Baum-Welch iterations"
    ),
    tolerance: Optional[float] = typer.Option(
        None,
        "--tolerance",
        "-t",
        help="Stop when the log-likelihood changes by less than this"
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed for random initialization"
    ),
    init_mode: Optional[str] = typer.Option(
        None,
        "--init",
        help="Initialization mode: uniform or random"
    ),
    epsilon: Optional[float] = typer.Option(
        None,
        "--epsilon",
        help="Probability floor"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print results as JSON instead of tables"
    )
):
    """
    Train an HMM on an observation sequence and decode it.

    Unset options fall back to the 'hmm' configuration section.

    Examples:
    ```
    hmm-engine fit "W H H W H" --states 2 --init uniform
    hmm-engine fit "a b b c a c" -s 3 -i 100 -t 1e-6 --seed 7 --json
    ```
    """
    debug = ctx.meta.get("debug", False)
    quiet = ctx.meta.get("quiet", False)

    try:
        tokens = validate_observation_text(observations)

        n_states = n_states if n_states is not None else get_config('hmm', 'n_states')
        max_iterations = max_iterations if max_iterations is not None else get_config('hmm', 'max_iterations')
        tolerance = tolerance if tolerance is not None else get_config('hmm', 'tolerance')
        seed = seed if seed is not None else get_config('hmm', 'seed')
        init_mode = init_mode if init_mode is not None else get_config('hmm', 'init_mode')
        epsilon = epsilon if epsilon is not None else get_config('hmm', 'epsilon')

        vocabulary = Vocabulary.from_tokens(tokens)
        encoded = vocabulary.encode(tokens)

        model = create_model(n_states, vocabulary.size, seed=seed, mode=init_mode, epsilon=epsilon)
        trainer = BaumWelchTrainer(
            max_iterations=max_iterations,
            tolerance=tolerance,
            epsilon=epsilon,
            scale_floor=get_config('hmm', 'scale_floor')
        )
        result = trainer.fit(model, encoded)
        path = decode(model, encoded, log_floor=get_config('hmm', 'log_floor'))

        logger.info(f"Trained {model!r} on {len(encoded)} observations in {result.iterations} iterations")

    except Exception as e:
        handle_cli_error(e, "fit", debug)
        return

    labels = state_labels(model.n_states)

    if as_json:
        payload = {
            "symbols": tokens,
            "vocab": vocabulary.as_dict(),
            "pi": model.pi.tolist(),
            "A": model.A.tolist(),
            "B": model.B.tolist(),
            "log_likelihood_history": result.log_likelihood_history,
            "converged": result.converged,
            "path": path,
            "sequence": [labels[state] for state in path]
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    if quiet:
        typer.echo(" ".join(labels[state] for state in path))
        return

    console.print(Panel.fit(
        f"[bold]Baum-Welch Training[/bold]\n"
        f"States: {model.n_states}\n"
        f"Init: {init_mode} (seed {seed})\n"
        f"Max Iterations: {max_iterations}\n"
        f"Tolerance: {tolerance}",
        border_style="blue"
    ))

    console.print(vector_table(model.pi, labels, title="Initial Distribution (pi)"))
    console.print(matrix_table(model.A, labels, labels, title="Transition Matrix (A)"))
    console.print(matrix_table(model.B, labels, list(vocabulary.symbols), title="Emission Matrix (B)"))
    console.print(history_table(result.log_likelihood_history))

    console.print(f"\n[bold]Viterbi path:[/bold] {' '.join(labels[state] for state in path)}")
    status = "converged" if result.converged else "iteration budget reached"
    console.print(f"[green]Done[/green] - symbols: {vocabulary.size}, length: {len(encoded)}, "
                  f"iters: {result.iterations} ({status})")


@app.command("version")
def show_version():
    """Show HMM engine version information."""
    console.print(Panel.fit(
        f"[bold]HMM Engine Version {__version__}[/bold]\n"
        f"Discrete HMM training and decoding\n"
        f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        border_style="blue"
    ))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging and debug information"
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Log errors only and print just the decoded state sequence"
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode with detailed error traces"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to JSON configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False
    )
):
    """
    HMM Engine: discrete Hidden Markov Models from the command line.

    \b
    Quick Start:
    hmm-engine fit "W H H W H" --states 2 --init uniform
    """
    ctx.meta["verbose"] = verbose
    ctx.meta["quiet"] = quiet
    ctx.meta["debug"] = debug

    if config_file:
        try:
            load_config_file(str(config_file))
        except ValueError as e:
            handle_cli_error(e, "configuration loading", debug)

    # Command-line switches override the configured level
    if quiet:
        set_log_level('ERROR')
    elif verbose or debug:
        set_log_level('DEBUG')
    else:
        set_log_level(get_config('logging', 'level') or 'WARNING')


def cli_main():
    """Main entry point for CLI with error handling."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(EXIT_CODES["general_error"])


if __name__ == "__main__":
    cli_main()
