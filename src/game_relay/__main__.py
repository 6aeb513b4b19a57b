from .websocket import main

main()
