from manifestsync.ui.cli import run

run()
