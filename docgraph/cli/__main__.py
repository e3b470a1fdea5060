from docgraph.cli import main

main()
