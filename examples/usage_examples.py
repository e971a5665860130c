"""
Examples of using the HMM engine.

This file demonstrates training a discrete HMM with Baum-Welch, decoding the
most likely state path, and the configuration and error handling around them.
"""

import numpy as np


def example_train_and_decode():
    """Train on a tokenized sequence and decode it."""
    from hmm_engine import BaumWelchTrainer, Vocabulary, create_model, decode, state_labels

    print("Example: Training and decoding")
    print("-" * 40)

    vocabulary, tokens = Vocabulary.from_text("W H H W H")
    observations = vocabulary.encode(tokens)

    model = create_model(n_states=2, n_observations=vocabulary.size, seed=0, mode='random')
    result = BaumWelchTrainer(max_iterations=30, tolerance=1e-4).fit(model, observations)
    path = decode(model, observations)

    labels = state_labels(model.n_states)
    print(f"Symbols: {vocabulary.as_dict()}")
    print(f"Iterations: {result.iterations} (converged: {result.converged})")
    print(f"Final log-likelihood: {result.final_log_likelihood:.6f}")
    print(f"Viterbi path: {' '.join(labels[state] for state in path)}")
    print(f"Transition matrix:\n{np.round(model.A, 4)}")
    print(f"Emission matrix:\n{np.round(model.B, 4)}")
    print()


def example_forward_backward():
    """Score a sequence and inspect the scaled forward/backward tables."""
    from hmm_engine import create_model, forward_scaled, backward_scaled

    print("Example: Forward/backward evaluation")
    print("-" * 40)

    model = create_model(n_states=3, n_observations=4, seed=42)
    observations = [0, 1, 2, 3, 2, 1, 0]

    forward = forward_scaled(model, observations)
    beta = backward_scaled(model, observations, forward.scale)

    print(f"Log-likelihood: {forward.log_likelihood:.6f}")
    print(f"Scaling coefficients: {np.round(forward.scale, 4)}")
    # Each entry is 1 when the scaling coefficients are consistent
    print(f"sum_i alpha*beta per step: {np.round((forward.alpha * beta).sum(axis=1), 6)}")
    print()


def example_custom_configuration():
    """Drive a trainer from configuration."""
    from hmm_engine.config import set_config, get_config
    from hmm_engine.train import BaumWelchTrainer

    print("Example: Custom configuration")
    print("-" * 40)

    set_config('hmm', 'max_iterations', 100)
    set_config('hmm', 'tolerance', 1e-6)

    trainer = BaumWelchTrainer.from_config()
    print(f"max_iterations={trainer.max_iterations}, tolerance={trainer.tolerance}")
    print(f"epsilon={get_config('hmm', 'epsilon')}")
    print()


def example_error_handling():
    """Invalid input fails fast with a descriptive error."""
    from hmm_engine import create_model, decode
    from hmm_engine.exceptions import InvalidConfigurationError, InvalidObservationError

    print("Example: Error handling")
    print("-" * 40)

    try:
        create_model(n_states=0, n_observations=2)
    except InvalidConfigurationError as e:
        print(f"Configuration error: {e}")

    model = create_model(n_states=2, n_observations=2, mode='uniform')
    try:
        decode(model, [0, 1, 2])
    except InvalidObservationError as e:
        print(f"Observation error: {e}")
    print()


def example_cli_commands():
    """Example CLI commands."""
    print("Example: CLI Commands")
    print("-" * 40)

    cli_examples = [
        "# Train and decode with tables",
        'hmm-engine fit "W H H W H" --states 2 --init uniform',
        "",
        "# JSON output for scripting",
        'hmm-engine fit "a b b c a c" -s 3 --seed 7 --json',
        "",
        "# Use a configuration file",
        'hmm-engine --config config.json fit "W H H W H"'
    ]

    for line in cli_examples:
        print(line)
    print()


if __name__ == "__main__":
    print("HMM Engine Usage Examples")
    print("=" * 50)
    print()

    example_train_and_decode()
    example_forward_backward()
    example_custom_configuration()
    example_error_handling()
    example_cli_commands()
