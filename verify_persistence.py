import time
import subprocess
import httpx
import sys
import os
import signal
from datetime import date, timedelta

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"

USERNAME = "persist_owner"
PASSWORD = "securePassword123"
PLATE = "PERSIST-01"
BOOKING_DAY = (date.today() + timedelta(days=60)).isoformat()


def start_server(echo=False):
    env = {**os.environ, "DB_ECHO": "True"} if echo else None
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "carshare.app.main:app", "--host", "127.0.0.1", "--port", "8000"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env
    )


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print(f"✅ Server is up! ({resp.json()['status']})")
                return True
        except httpx.ConnectError:
            pass
        except Exception as e:
            print(f"Connect error: {e}")
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def login():
    resp = httpx.post(f"{BASE_URL}{API_PREFIX}/auth/login", json={"username": USERNAME, "password": PASSWORD})
    if resp.status_code != 200:
        raise Exception(f"Login failed: {resp.status_code} {resp.text}")
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def booking(vehicle_id):
    return {
        "vehicle_id": vehicle_id,
        "date_start": BOOKING_DAY,
        "date_end": BOOKING_DAY,
        "time_start": "09:00:00",
        "time_end": "12:00:00",
        "motive": "Persistence check"
    }


def find_vehicle(headers):
    resp = httpx.get(f"{BASE_URL}{API_PREFIX}/vehicles", headers=headers)
    for vehicle in resp.json()["vehicles"]:
        if vehicle["plate_number"] == PLATE:
            return vehicle["id"]
    return None


def run_verification():
    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server(echo=True)

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        # 2. Register User, Vehicle and Reservation
        print("\n--- [Step 2] Seeding Owner, Vehicle and Reservation ---")
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/auth/register", json={
            "email": "persist_owner@test.com",
            "username": USERNAME,
            "password": PASSWORD
        })
        if resp.status_code == 400 and "already registered" in resp.text:
            print("⚠️ User already exists (persistence working from previous run?)")
        elif resp.status_code == 201:
            print("✅ User Registered Successfully")
        else:
            raise Exception(f"Registration failed: {resp.status_code} {resp.text}")

        headers = login()
        vehicle_id = find_vehicle(headers)
        if vehicle_id is None:
            resp = httpx.post(f"{BASE_URL}{API_PREFIX}/vehicles", headers=headers, json={
                "name": "Persistence car",
                "plate_number": PLATE,
                "model": "Clio",
                "manufacturer": "Renault",
                "fuel_type": "GASOLINE"
            })
            if resp.status_code != 201:
                raise Exception(f"Vehicle creation failed: {resp.status_code} {resp.text}")
            vehicle_id = resp.json()["id"]
        print(f"✅ Vehicle {vehicle_id} ready")

        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/reservations", headers=headers, json=booking(vehicle_id))
        if resp.status_code == 201:
            print("✅ Reservation admitted")
        elif resp.status_code == 409:
            print("⚠️ Slot already booked (persistence working from previous run?)")
        else:
            raise Exception(f"Reservation failed: {resp.status_code} {resp.text}")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop_server(proc)

    time.sleep(2) # Wait for port release

    # 3. Restart Server
    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = start_server()

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        print("\n--- [Step 5] Logging In (Post-Restart) ---")
        headers = login()
        print("✅ Login Successful (User Persisted!)")

        print("\n--- [Step 6] Verifying Calendar ---")
        vehicle_id = find_vehicle(headers)
        if vehicle_id is None:
            raise Exception("Vehicle missing after restart")

        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/vehicles/{vehicle_id}/reservations", headers=headers)
        if resp.json()["total"] < 1:
            raise Exception("Reservation missing after restart")
        print("✅ Reservation Persisted")

        # The persisted reservation must still block its window
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/reservations", headers=headers, json=booking(vehicle_id))
        if resp.status_code == 409:
            print("✅ Persisted reservation still blocks its slot")
        else:
            print(f"❌ Expected 409 Conflict, got {resp.status_code}: {resp.text}")

    finally:
        print("\n--- [Step 7] Stopping Server ---")
        stop_server(proc2)

if __name__ == "__main__":
    run_verification()
