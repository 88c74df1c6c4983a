import httpx
import asyncio
import os
import sys

BASE_URL = os.environ.get("VERIFY_BASE_URL", "http://localhost:3000")

async def run_verification() -> bool:
    print(f"🚀  Starting Verification against {BASE_URL}...\n")

    passed = True

    async with httpx.AsyncClient(base_url=BASE_URL, timeout=10.0) as client:
        # 1. Health Check
        print("1. [Health] Checking /healthz...")
        try:
            resp = await client.get("/healthz")
            if resp.status_code == 200 and resp.json().get("ok") is True:
                print(f"   ✅  Health Check Passed (version {resp.json()['version']})")
            else:
                print(f"   ❌  Health Check Failed: {resp.text}")
                return False
        except httpx.HTTPError as e:
            print(f"   ❌  Connection Error: {e}")
            return False

        # 2. Create Link
        print("\n2. [API] Creating Short Link...")
        code = "verify01"

        # Cleanup first if exists
        await client.delete(f"/api/links/{code}")

        resp = await client.post("/api/links", json={"url": "www.example.com", "code": code})
        if resp.status_code == 201:
            data = resp.json()
            print(f"   ✅  Created: {data['shortUrl']} -> {data['originalUrl']}")
        else:
            print(f"   ❌  Create Failed: {resp.status_code} {resp.text}")
            return False

        # 3. Duplicate code
        print("\n3. [API] Verifying duplicate code is refused...")
        resp = await client.post("/api/links", json={"url": "https://other.example.com", "code": code})
        if resp.status_code == 409:
            print("   ✅  Duplicate refused with 409")
        else:
            print(f"   ❌  Expected 409, got {resp.status_code}")
            passed = False

        # 4. Concurrent redirects
        clicks = 20
        print(f"\n4. [API] Sending {clicks} concurrent redirects...")
        responses = await asyncio.gather(*(client.get(f"/{code}") for _ in range(clicks)))
        statuses = {r.status_code for r in responses}
        if statuses == {302}:
            print(f"   ✅  All redirected to {responses[0].headers['location']}")
        else:
            print(f"   ❌  Unexpected statuses: {statuses}")
            passed = False

        # 5. Click accounting
        print("\n5. [API] Verifying click count...")
        resp = await client.get(f"/api/links/{code}")
        data = resp.json()
        if resp.status_code == 200 and data["clickCount"] == clicks:
            print(f"   ✅  Click Count: {data['clickCount']}, last clicked {data['lastClickedAt']}")
        else:
            print(f"   ❌  Click Count mismatch: {data}")
            passed = False

        # 6. Delete
        print("\n6. [API] Deleting link...")
        resp = await client.delete(f"/api/links/{code}")
        gone = await client.get(f"/{code}")
        if resp.status_code == 200 and gone.status_code == 404:
            print("   ✅  Deleted, redirect now 404")
        else:
            print(f"   ❌  Delete Failed: {resp.status_code} / redirect {gone.status_code}")
            passed = False

        # 7. Metrics
        print("\n7. [Observability] Verifying Metrics...")
        resp = await client.get("/metrics")
        if resp.status_code == 200 and "http_requests_total" in resp.text:
            print("   ✅  Metrics Endpoint Exposed")
        else:
            print(f"   ❌  Metrics Failed: {resp.status_code}")
            passed = False

    print("\n✨ Verification Complete!" if passed else "\n💥 Verification Failed")
    return passed

if __name__ == "__main__":
    sys.exit(0 if asyncio.run(run_verification()) else 1)
