#!/usr/bin/env python3
"""Run the lingoduel API server."""

import logging
import os

import uvicorn


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    port = int(os.environ.get('PORT', '8000'))
    print("Starting Lingoduel API server...")
    print(f"API documentation available at: http://localhost:{port}/docs")
    uvicorn.run(
        "server.app:app",
        host="0.0.0.0",
        port=port,
        reload=os.environ.get('DUEL_RELOAD') == '1'
    )


if __name__ == "__main__":
    main()
