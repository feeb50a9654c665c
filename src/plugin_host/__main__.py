from plugin_host.cli import main

main()
