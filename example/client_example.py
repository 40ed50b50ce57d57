from x402_autopay import Http402Client, RequestOptions, load_settings, setup_logger
from x402_autopay.schemas.https import HeaderParameter
import httpx

setup_logger("INFO")

# Reads X402_WALLET_SEED / X402_MAX_PAYMENT_USD from the environment
settings = load_settings()


async def main():
    async with Http402Client.from_settings(
        settings,
        timeout=httpx.Timeout(60.0, read=120.0)
    ) as client:
        result = await client.execute(
            RequestOptions(
                url="http://localhost:8000/api/protected-data",
                send_headers=True,
                headers=[HeaderParameter(name="Authorization", value="Bearer eyJlxxxxxx")],
                max_payment_usd=settings.max_payment_usd,
                network="base-sepolia",
            )
        )
        return result.to_item()


if __name__ == "__main__":
    import asyncio
    item = asyncio.run(main())
    print("Response:", item)
