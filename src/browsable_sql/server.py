#!/usr/bin/env python
"""
Browsable SQL Gateway Startup Script

This script starts the gateway server over the storage named by DATABASE_URL.
"""

import argparse
import uvicorn


def main():
    parser = argparse.ArgumentParser(description='Browsable SQL Gateway Server')
    parser.add_argument('--host', default='127.0.0.1', help='Host to bind to (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=8000, help='Port to bind to (default: 8000)')
    parser.add_argument('--reload', action='store_true', help='Enable auto-reload (development)')

    args = parser.parse_args()

    uvicorn.run(
        'browsable_sql.main:create_app',
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info"
    )


if __name__ == '__main__':
    main()
