from niv_updater.cli import main

main()
