"""
Smoke-test для зібраного AdStats (PyInstaller)
Запускає бінарник з тимчасовою базою, чекає 8 секунд, перевіряє:
 1. Процес запустився
 2. Процес не впав (exit code)
 3. Файл бази створено з заголовком

Запуск: python tests/smoke_test.py [шлях_до_бінарника]
"""

import os
import subprocess
import sys
import tempfile
import time

DEFAULT_EXE = os.path.join("dist", "AdStats.exe" if sys.platform == "win32" else "AdStats")
ALIVE_SECONDS = 8


def main():
    exe_path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_EXE
    print(f"🧪 Smoke test: {exe_path}")

    if not os.path.isfile(exe_path):
        print(f"❌ Файл не знайдено: {exe_path}")
        sys.exit(1)

    # Окремий HOME — щоб не чіпати справжню базу користувача
    home = tempfile.mkdtemp(prefix="adstats_smoke_")
    env = dict(os.environ, HOME=home, USERPROFILE=home)

    print("   Запуск процесу...")
    try:
        proc = subprocess.Popen(
            [exe_path],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=env,
        )
    except OSError as e:
        print(f"❌ Не вдалося запустити: {e}")
        sys.exit(1)

    print(f"   PID: {proc.pid}")

    for i in range(ALIVE_SECONDS):
        time.sleep(1)
        ret = proc.poll()
        if ret is not None:
            stderr = proc.stderr.read().decode("utf-8", errors="replace")
            print(f"❌ Процес впав через {i + 1} сек з кодом {ret}")
            if stderr.strip():
                print(f"   STDERR: {stderr[:500]}")
            sys.exit(1)
        print(f"   ... alive ({i + 1}/{ALIVE_SECONDS} sec)")

    proc.terminate()
    try:
        proc.wait(timeout=5)
    except subprocess.TimeoutExpired:
        proc.kill()

    # База має з'явитись у settings-папці тимчасового HOME
    found = [os.path.join(root, f) for root, _, files in os.walk(home)
             for f in files if f == "adstats_db.txt"]
    if not found:
        print("❌ Файл бази не створено")
        sys.exit(1)

    print(f"   База: {found[0]}")
    print("✅ Smoke test PASSED — застосунок запустився і створив базу")
    sys.exit(0)


if __name__ == "__main__":
    main()
