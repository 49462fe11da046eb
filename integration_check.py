from __future__ import annotations

import argparse
import asyncio

import httpx

from audit_relay.core.config import settings
from audit_relay.core.phone import normalize_phone
from audit_relay.services.pagespeed_service import PageSpeedService
from audit_relay.services.whatsapp_service import WhatsAppClient


async def _run(args: argparse.Namespace) -> None:
    async with httpx.AsyncClient() as client:
        if args.pagespeed:
            service = PageSpeedService(settings, client)
            result = await service.run(args.pagespeed, args.strategy)
            categories = result.data.get("lighthouseResult", {}).get("categories", {})
            print("PageSpeed done:", result.url, result.strategy)
            for name, category in categories.items():
                print(" ", name, category.get("score"))

        if args.whatsapp:
            number = normalize_phone(args.whatsapp)
            if number is None:
                raise SystemExit(f"Invalid phone number: {args.whatsapp}")
            whatsapp = WhatsAppClient(settings, client)
            message_id = await whatsapp.send_text(number, args.message)
            print("WhatsApp sent:", number, message_id)


def main() -> None:
    parser = argparse.ArgumentParser(description="Upstream API connectivity check")
    parser.add_argument("--pagespeed", metavar="URL", help="Run one PageSpeed analysis")
    parser.add_argument("--strategy", default="mobile", choices=("mobile", "desktop"))
    parser.add_argument("--whatsapp", metavar="NUMBER", help="Send a test WhatsApp message")
    parser.add_argument("--message", default="SEO audit relay connectivity check")
    args = parser.parse_args()
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
