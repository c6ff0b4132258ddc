# tests/fake_worker.py
"""Stand-in for the low-level installer, driven by the scenario in argv[1]."""
import sys


def say(line):
    print(line, flush=True)


def main():
    scenario = sys.argv[1]
    config = sys.stdin.readline().rstrip("\n")

    if scenario == "echo":
        say(f"message: {config}")
        say("finished: ok, done")
    elif scenario == "success":
        say("progress: 0.25 partitioning")
        say("message: hello")
        say("prompt: continue?")
        answer = sys.stdin.readline()
        say(f"message: answer={answer.rstrip(chr(10))!r}")
        say("progress: 0.999 almost")
        say("finished: ok, Installation done")
    elif scenario == "garbage":
        say("bogus line")
        say("progress: abc partitioning")
        say("progress: 0.5 halfway")
        say("finished: fail, oops")
    elif scenario == "latin1":
        sys.stdout.buffer.write(b"message: caf\xe9 latin-1 text\n")
        sys.stdout.buffer.flush()
        say("progress: 0.5 halfway")
        say("finished: ok, done")
    elif scenario == "early":
        say("progress: 0.5 halfway")


if __name__ == "__main__":
    main()
