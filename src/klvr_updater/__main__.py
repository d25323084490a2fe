from klvr_updater.cli import main

main()
