import json
import os
import time

import requests
import serial

SERIAL_PORT = os.environ.get("SERIAL_PORT", "/dev/cu.usbmodem101")
BAUD_RATE = 9600
API_URL = os.environ.get("CHAIR_API_URL", "http://127.0.0.1:3000/chair")
CHAIR_ID = os.environ.get("CHAIR_ID", "CHAIR01")
SEND_INTERVAL_S = 1.0


class SendThrottle:
    """Lets one reading through per interval. Owned by the caller, not global."""

    def __init__(self, interval_s=SEND_INTERVAL_S, clock=time.monotonic):
        self.interval_s = interval_s
        self._clock = clock
        self._last_sent = None

    def ready(self):
        now = self._clock()
        return self._last_sent is None or now - self._last_sent >= self.interval_s

    def mark_sent(self):
        self._last_sent = self._clock()


def build_payload(data, chair_id=CHAIR_ID):
    """Turn one ESP32 JSON object into a /chair request body, or None if unusable."""
    if not isinstance(data, dict):
        return None
    sensors = data.get("sensors")
    if not isinstance(sensors, list):
        return None
    return {"id": data.get("id") or chair_id, "sensors": sensors}


def forward_line(line, throttle, session=requests, api_url=API_URL):
    """Parse and post one serial line. Returns True when a reading was sent."""
    line = line.strip()
    if not line:
        return False

    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        print(f"[WARNING] Bad JSON: {line}")
        return False

    payload = build_payload(data)
    if payload is None:
        print(f"[WARNING] Missing sensors in data: {data}")
        return False

    if not throttle.ready():
        return False

    response = session.post(api_url, json=payload, timeout=5)
    throttle.mark_sent()
    if response.status_code == 200:
        print(f"[OK] {payload['id']}: {response.json().get('postureStatus')}")
        return True

    print(f"[ERROR] Failed to send data: {response.status_code} - {response.text}")
    return False


def main():
    try:
        ser = serial.Serial(SERIAL_PORT, BAUD_RATE, timeout=2)
        print(f"[INFO] Connected to {SERIAL_PORT} at {BAUD_RATE} baud.")
    except serial.SerialException as e:
        print(f"[ERROR] Could not open serial port {SERIAL_PORT}: {e}")
        return

    throttle = SendThrottle()
    while True:
        try:
            line = ser.readline().decode("utf-8", errors="replace")
            forward_line(line, throttle)
        except requests.RequestException as e:
            print(f"[ERROR] Could not reach {API_URL}: {e}")
            time.sleep(1)  # Wait before retrying
        except serial.SerialException as e:
            print(f"[ERROR] Serial port error: {e}")
            return


if __name__ == "__main__":
    main()
