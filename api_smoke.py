# api_smoke.py
"""
手动冒烟测试，针对正在运行的服务：

    python api_smoke.py [base_url] [wallet_address]

依次请求 /health、/balance/<wallet>，并发送一笔 0.01 token 转账。
转账是真实的：会消耗服务钱包的 token 和 gas。
"""
import json
import sys

import requests

API_BASE = "http://localhost:3000"
TEST_WALLET = "0x742d35cc6634c0532925a3b8d44268d9c8c16c99"  # 示例地址


def _show(title: str, resp: requests.Response) -> None:
    mark = "✅" if resp.ok else "❌"
    try:
        body = resp.json()
    except ValueError:
        body = resp.text
    print(f"{mark} {title} [{resp.status_code}]:", json.dumps(body, indent=2, ensure_ascii=False))
    print("")


def run_smoke(base_url: str = API_BASE, wallet: str = TEST_WALLET) -> None:
    print("🧪 Running API smoke test...\n")

    print("1️⃣ Health check...")
    _show("Health", requests.get(f"{base_url}/health", timeout=30))

    print("2️⃣ Balance check...")
    _show("Balance", requests.get(f"{base_url}/balance/{wallet}", timeout=30))

    print("3️⃣ Token transfer...")
    resp = requests.post(
        f"{base_url}/transfer",
        json={"amount": 0.01, "walletAddress": wallet},
        timeout=300,
    )
    _show("Transfer", resp)


if __name__ == "__main__":
    args = sys.argv[1:]
    try:
        run_smoke(*args[:2])
    except requests.RequestException as e:
        print("🚨 Request failed:", e)
        sys.exit(1)
