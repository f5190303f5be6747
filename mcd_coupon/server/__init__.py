"""
mcd-coupon JSON-RPC Relay Package.

A local HTTP endpoint speaking JSON-RPC 2.0 and the MCP "tools" convention,
proxying the four coupon tools to one shared Remote Tool Client.

Modules:
    schemas: Pydantic models for requests, responses and method descriptions.
    descriptors: Static introspection metadata.
    dispatcher: The method dispatch table and the shared client handle.
    api: FastAPI route definitions.
    main: Application factory and uvicorn runner.
"""
