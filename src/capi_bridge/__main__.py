from capi_bridge.app import main

main()
