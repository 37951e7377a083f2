import os
from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "production")
IS_DEBUG = APP_ENV == "development"

# 서버 리슨 포트 (집계 서버 / 위임 스크래핑 서버 공통)
PORT = int(os.getenv("PORT", "3001"))

LOG_DIR = os.getenv("LOG_DIR", "logs")

# 브라우저가 필요한 사이트(시민회관, CREA)를 대신 처리하는 위임 서버 주소.
# 비어 있으면 같은 프로세스 안에서 직접 크롤링합니다.
DELEGATE_API_URL = (os.getenv("DELEGATE_API_URL") or os.getenv("RENDER_API_URL") or "").rstrip("/")
# 위임 서버는 콜드 스타트가 있을 수 있어 넉넉하게 잡음
DELEGATE_TIMEOUT = float(os.getenv("DELEGATE_TIMEOUT", "120"))

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))
HTTP_RETRIES = int(os.getenv("HTTP_RETRIES", "0"))

BROWSER_USER_AGENT = os.getenv(
    "BROWSER_USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

# 브라우저 페이지 기본 타임아웃 (ms)
BROWSER_PAGE_TIMEOUT_MS = int(os.getenv("BROWSER_PAGE_TIMEOUT_MS", "60000"))

# 동시에 열 수 있는 브라우저 페이지 수 (호스팅 환경 메모리 제한)
BROWSER_CONCURRENCY = int(os.getenv("BROWSER_CONCURRENCY", "2"))

# --- 福岡市民会館 ---
CIVIC_HALL_URL = os.getenv("CIVIC_HALL_URL", "https://k3.p-kashikan.jp/fukuoka-kyotenbunka/index.php")
CIVIC_HALL_FACILITY_CODE = os.getenv("CIVIC_HALL_FACILITY_CODE", "001")
CIVIC_HALL_STRATEGY = os.getenv("CIVIC_HALL_STRATEGY", "form")  # form | browser

# --- CREA (Coubic) ---
CREA_STRATEGY = os.getenv("CREA_STRATEGY", "api")  # api | browser
CREA_API_URL = os.getenv(
    "CREA_API_URL",
    "https://coubic.com/api/v2/merchants/rentalstudiocrea/booking_events",
)
# 세션 상태: 인라인 JSON이 파일보다 우선
CREA_AUTH_JSON = os.getenv("CREA_AUTH_JSON") or os.getenv("CREA_AUTH_STATE")
CREA_AUTH_PATH = os.getenv("CREA_AUTH_PATH", "auth-crea.json")

RATE_LIMIT_PER_MINUTE = int(os.getenv("RATE_LIMIT_PER_MINUTE", "30"))
