"""Ledger Seed Script - Creates demo dealer assets through the gateway"""
import asyncio
import sys

from asset_chaincode import new_chaincode
from asset_api.config import settings
from asset_api.database import build_engine, build_sessionmaker, init_db, close_db
from asset_api.ledger.peer import Peer
from asset_api.schemas.asset import AssetRequest
from asset_api.services.gateway import Gateway, GatewayError, load_identity

DEMO_ASSETS = [
    {
        "DEALERID": "D1",
        "MSISDN": "555",
        "MPIN": "0000",
        "BALANCE": 100.0,
        "STATUS": "A",
        "TRANSAMOUNT": 0.0,
        "TRANSTYPE": "INIT",
        "REMARKS": "seed",
    },
    {
        "DEALERID": "D2",
        "MSISDN": "556",
        "MPIN": "1111",
        "BALANCE": 250.5,
        "STATUS": "A",
        "TRANSAMOUNT": 0.0,
        "TRANSTYPE": "INIT",
        "REMARKS": "seed",
    },
]


async def seed_ledger():
    """Seed the ledger with demo assets; existing ones are left untouched"""
    print("=" * 60)
    print("LEDGER SEEDING STARTED")
    print("=" * 60)

    engine = build_engine(settings.DATABASE_URL)
    await init_db(engine)

    peer = Peer(build_sessionmaker(engine), {settings.CHAINCODE_NAME: new_chaincode()})
    gateway = Gateway(
        load_identity(settings.MSP_ID, settings.CERT_PATH),
        peer,
        evaluate_timeout=settings.EVALUATE_TIMEOUT,
        endorse_timeout=settings.ENDORSE_TIMEOUT,
        submit_timeout=settings.SUBMIT_TIMEOUT,
        commit_status_timeout=settings.COMMIT_STATUS_TIMEOUT,
    )
    contract = gateway.get_network(settings.CHANNEL_NAME).get_contract(settings.CHAINCODE_NAME)

    created = 0
    try:
        print("\nCreating Assets...")
        for body in DEMO_ASSETS:
            request = AssetRequest(**body)
            try:
                await contract.submit_transaction("CreateAsset", *request.to_args())
            except GatewayError as e:
                if e.kind != "AlreadyExists":
                    raise
                print(f"   - {request.dealer_id} already on the ledger, skipping")
                continue
            created += 1
            print(f"   ✓ Created: {request.dealer_id} (balance {request.balance})")
    finally:
        await gateway.close()
        await close_db(engine)

    print("\n" + "=" * 60)
    print("✅ LEDGER SEEDING COMPLETED")
    print("=" * 60)
    print(f"\n   • Assets created: {created}")
    print(f"   • Channel: {settings.CHANNEL_NAME}, chaincode: {settings.CHAINCODE_NAME}")

    print("\n💡 NEXT STEPS:")
    print("   1. Start the API server: uvicorn asset_api.main:app --port 8080")
    print("   2. GET /read/D1")
    print("   3. GET /history/D1")


async def main():
    """Main entry point"""
    try:
        await seed_ledger()
    except Exception as e:
        print(f"\n❌ Seeding failed: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
