import os
import uvicorn
from dotenv import load_dotenv

def main():
    base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    dotenv_path = os.path.join(base_dir, '.env')
    print(f"Loading env from {dotenv_path}...")
    load_dotenv(dotenv_path)

    api_url = os.environ.get("PLATFORM_API_URL")
    print(f"PLATFORM_API_URL: {api_url}" if api_url else "PLATFORM_API_URL: NOT SET (using http://localhost:3000/api)")

    # Local runs are plain http; secure cookies would never come back
    os.environ.setdefault("SESSION_COOKIE_SECURE", "false")

    port = int(os.environ.get("PORT", "8000"))
    print(f"Starting admin console at http://127.0.0.1:{port}/admin")
    uvicorn.run("luvrix_admin.main:app", host="127.0.0.1", port=port, reload=True)

if __name__ == "__main__":
    main()
