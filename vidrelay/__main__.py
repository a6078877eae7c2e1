from vidrelay.main import run

run()
