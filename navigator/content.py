from typing import Dict

from .models import ChatMessage


WELCOME_MESSAGE = ChatMessage(
    role="assistant",
    content=(
        "Welcome! Please describe your dream campervan trip in Taiwan. "
        "**Crucially, include the start and end dates** so I can provide weather forecasts. "
        'For example: "Plan a 7-day trip from Taipei to Kaohsiung, starting July 22nd, 2024, '
        'focusing on coastal views and seafood."'
    ),
)

CONTACT = "skadoosh.ai.lab@gmail.com"

INFO_PAGES: Dict[str, Dict[str, str]] = {
    "about": {
        "title": "About Taiwan Campervan AI Navigator",
        "content": (
            "This application is your all-in-one AI planning tool for campervan adventures in Taiwan. "
            "It uses Google's Gemini AI and OpenStreetMap to create itineraries tailored to your travel style.\n\n"
            "### How to Use This App\n\n"
            "1. **Plan a Full Trip:** Describe your trip in detail. Include duration, start/end points, "
            "specific dates, and your interests (e.g., \"7-day trip from Taipei to Hualien starting "
            "August 1st, 2024, I love hiking and local food\"). You get a day-by-day itinerary with "
            "weather forecasts and the route plotted on the map.\n"
            "2. **Get Specific Recommendations:** Ask for targeted suggestions without generating a new "
            "route, such as \"What are the best beef noodle soup restaurants in Tainan?\" or \"Find "
            "campsites near Sun Moon Lake.\" The route stays as it is and you get a list of recommendations.\n\n"
            f"For any inquiries, please contact: {CONTACT}.\n\n"
            "[Camper Road Taiwan](https://www.camperoadtaiwan.com/)"
        ),
    },
    "privacy": {
        "title": "Privacy Policy",
        "content": (
            "**We do not collect, store, or share any of your personal data.**\n\n"
            "- **No Data Collection:** There is no database. Prompts, locations and itineraries live "
            "only in the current session and are gone when you clear the history or end the session.\n"
            "- **How Your Data is Used:** The information you provide is sent to third-party services "
            "for real-time processing:\n"
            "  - **Google's Gemini API** processes your prompt to generate the itinerary.\n"
            "  - **Open-Meteo API** uses coordinates and dates from the itinerary to fetch weather forecasts.\n"
            "- **Third-Party Policies:** Your interactions are subject to the privacy policies of Google "
            "and Open-Meteo.\n\n"
            f"For any inquiries about your privacy, please contact: {CONTACT}."
        ),
    },
    "safety": {
        "title": "Campervan Safety Tips",
        "content": (
            "Safety should always be your top priority on a campervan trip around Taiwan:\n\n"
            "- **Do not drink and drive.** Taiwan has a zero-tolerance policy for driving under the influence.\n"
            "- **Be aware of wildlife,** especially at night in mountainous or rural areas.\n"
            "- **Check vehicle height.** Watch for height restrictions (限高) in underpasses, tunnels and "
            "indoor parking. Prefer open-air parking.\n"
            "- **Manage your speed.** Campervans are heavier and have a higher center of gravity than cars, "
            "so take winding mountain roads and strong winds slowly.\n"
            "- **Secure your belongings** before driving so nothing moves around inside the van.\n"
            "- **Plan your stops.** Take regular breaks on long drives to stay alert."
        ),
    },
}
