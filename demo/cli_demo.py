#!/usr/bin/env python3
"""
Interactive CLI demo for the ERP Intent Service.

Type instructions in Spanish ("listar pacientes", "crear cliente") and see the
resolved call, or answer the follow-up question when parameters are missing.
"""
import json
import os

from dotenv import load_dotenv

# Imports assume the package is installed (pip install -e .) or PYTHONPATH=src
from erp_intent.app import ErpIntentApp
from erp_intent.config_loader import load_config_from_env
from erp_intent.exceptions import ErpIntentError

# Load environment variables
load_dotenv()

ALL_MODULES = ["CLINICO", "VENTAS", "INVENTARIO", "COMPRAS"]
ALL_ACTIONS = ["CREATE", "READ", "UPDATE", "DELETE"]


def print_banner():
    """Print welcome banner."""
    print("\n" + "=" * 60)
    print("  ERP Intent Service - Interactive CLI Demo")
    print("=" * 60)
    print("\nTry:")
    print("  • listar pacientes")
    print("  • buscar paciente Juan Perez")
    print("  • crear cliente  (then: el nombre es ACME)")
    print("  • eliminar cliente id 42")
    print("\nType 'quit' or 'exit' to end the session.")
    print("-" * 60 + "\n")


def print_response(result: dict):
    """Print formatted response."""
    if result.get("status") == "awaiting_parameters":
        print(f"\n❓ {result['message']}")
        for param in result["needsParameters"]:
            print(f"   - {param['param']} ({param['type']}): {param['description']}")
    else:
        print(f"\n✅ {result['module']} / {result['action']} -> {result['httpMethod']} {result['endpointRoute']}")
        print(f"📦 Payload: {json.dumps(result['payload'], ensure_ascii=False)}")
        print(f"📈 Confidence: {result['confidence']}")
        print(f"🔧 {result['curl']}")
    print("-" * 60)


def main():
    print_banner()

    config = load_config_from_env()
    config.enable_sweeper = False
    engine = ErpIntentApp(config)
    engine.initialize()

    context = {
        "erpId": os.getenv("ERP_INTENT_DEMO_ERP", "demo"),
        "permissions": {"modules": ALL_MODULES, "actions": ALL_ACTIONS},
    }
    session_id = None

    try:
        while True:
            try:
                message = input("🗨️  > ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            if message.lower() in ("quit", "exit"):
                break
            if not message:
                continue

            body = {"message": message, "context": context}
            if session_id:
                body["sessionId"] = session_id

            try:
                result = engine.interpret(body)
            except ErpIntentError as e:
                session_id = None
                print(f"\n⚠️  {e}")
                print("-" * 60)
                continue

            session_id = result.get("sessionId")
            print_response(result)
    finally:
        engine.shutdown()

    print("\n👋 Bye!")


if __name__ == "__main__":
    main()
