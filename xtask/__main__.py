from xtask.main import main

main(prog_name="cargo xtask")
