import subprocess
import sys

# Using 'uv run' to ensure we use the project's environment and dependencies
COMMANDS = [
    (["uv", "run", "ruff", "check", "src", "tests", "examples"], "ruff_output.txt"),
    (["uv", "run", "mypy", "src/dkd"], "mypy_output.txt"),
    (["uv", "run", "pytest", "-v", "tests"], "test_output.txt"),
]


def run_command(command, output_file):
    print(f"Running: {' '.join(command)}")
    try:
        with open(output_file, "w") as f:
            result = subprocess.run(command, stdout=f, stderr=subprocess.STDOUT, text=True)
    except OSError as e:
        print(f"Could not run {command[0]}: {e}")
        return 1
    print(f"Finished: {' '.join(command)} (Exit Code: {result.returncode})")
    return result.returncode


def main(selected=None):
    failed = [
        output_file
        for command, output_file in COMMANDS
        if (not selected or command[2] in selected) and run_command(command, output_file) != 0
    ]
    if failed:
        print("Some checks failed, see: " + ", ".join(failed))
        sys.exit(1)
    print("All checks passed!")


if __name__ == "__main__":
    # e.g. python run_checks.py pytest mypy
    main(set(sys.argv[1:]))
