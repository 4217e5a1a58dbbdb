from encvolume.cli import run

run()
