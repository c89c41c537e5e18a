from blob_quickstart.cli import main

main()
