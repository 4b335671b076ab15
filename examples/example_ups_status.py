#!/usr/bin/env python3
"""
Example: UPS status over STARTTLS

Connects to a NUT server, upgrades the connection to TLS, authenticates,
selects a UPS and prints its model, its power source and (when running on
battery) its remaining charge.

Edit the constants below for your server.
Run: python examples/example_ups_status.py
"""

import ssl
import sys

from purenut import NutClient, ParseError, ProtocolError, PureNutError, setup_logging

SERVER = "ups.mydomain.com:3493"
LOGIN = "mylogin"
PASSWORD = "mypassword"
UPS_NAME = "my-ups-name"

setup_logging(level="WARNING")


def insecure_context() -> ssl.SSLContext:
    # upsd commonly runs with a self-signed certificate
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def main() -> int:
    try:
        client = NutClient.dial(SERVER, timeout=10.0)
    except PureNutError as e:
        print(f"Error: {e}")
        return 1

    with client:
        try:
            client.start_tls(insecure_context(), server_hostname="localhost")
        except PureNutError as e:
            print(f"TLS Error: {e}")
            return 1

        try:
            client.authenticate(LOGIN, PASSWORD)
        except PureNutError as e:
            print(f"Auth Error: {e}")
            return 1

        try:
            client.select_ups(UPS_NAME)
        except PureNutError as e:
            print(f"Login Error: {e}")
            return 1

        try:
            model = client.get_ups_model()
        except PureNutError as e:
            print(f"Cannot get UPS Model: {e}")
            return 1
        print(f"UPS Name : {model}")

        try:
            if client.is_online():
                print("ups is online")
            if client.is_on_battery():
                print("ups is on batteries")
                charge = client.battery_charge(strict=False)
                if charge >= 0:
                    print(f"Charge : {charge} %")
                else:
                    print("Cannot get ups charge")
        except (ParseError, ProtocolError) as e:
            print(f"Cannot read UPS status: {e}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
