from codesync.cli import run

run()
