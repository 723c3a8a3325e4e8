# streamlit_app/app.py
import streamlit as st
import requests, os
import matplotlib.pyplot as plt
import pandas as pd

API_BASE = os.environ.get("API_BASE", "http://localhost:8000")

CATEGORY_COLORS = {"transport": "#e0a030", "energy": "#1b8a4c", "food": "#4cbf4c", "waste": "#7a9488"}

st.set_page_config(page_title="EcoVoice Carbon Tracker", layout="wide", initial_sidebar_state="expanded")

# -------------------------------
# Helpers
# -------------------------------
def api(method: str, path: str, **kwargs):
    """Call the backend. Returns (data, error_notice)."""
    url = API_BASE.rstrip("/") + path
    try:
        resp = requests.request(method, url, timeout=30, **kwargs)
    except requests.RequestException as e:
        return None, {"title": "Could not reach the server", "description": str(e)}
    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not resp.ok:
        notice = data.get("notice") if isinstance(data, dict) else None
        return None, notice or {"title": f"Request failed ({resp.status_code})", "description": resp.text}
    return data, None


def show_notice(notice, error=False):
    if not notice:
        return
    text = notice.get("title", "")
    if notice.get("description"):
        text += " - " + notice["description"]
    if error or notice.get("variant") == "destructive":
        st.error(text)
    else:
        st.success(text)


def show_logged(data, error):
    if error:
        show_notice(error, error=True)
        return
    show_notice(data["notice"])
    st.info("Eco Tip! 🌍 " + data["tip"])


def pie_chart(totals: dict, title: str):
    cats = [c for c, v in totals.items() if v > 0]
    if not cats:
        st.info(f"No emissions to show for {title.lower()}.")
        return
    fig, ax = plt.subplots()
    ax.pie([totals[c] for c in cats], labels=[c.title() for c in cats],
           colors=[CATEGORY_COLORS[c] for c in cats], autopct="%1.0f%%")
    ax.set_title(title)
    st.pyplot(fig)


# -------------------------------
# Sidebar: profile
# -------------------------------
if "user_id" not in st.session_state:
    st.session_state["user_id"] = None
if "username" not in st.session_state:
    st.session_state["username"] = None

st.sidebar.title("Profile")
if st.session_state["user_id"]:
    st.sidebar.write("Tracking as", st.session_state["username"])
    if st.sidebar.button("Switch profile"):
        st.session_state["user_id"] = None
        st.session_state["username"] = None
        st.rerun()
else:
    with st.sidebar.form("profile_form"):
        username = st.text_input("Username")
        existing_id = st.text_input("...or existing profile id")
        submitted = st.form_submit_button("Continue")
        if submitted:
            if existing_id.strip():
                data, err = api("GET", f"/profiles/{existing_id.strip()}")
            else:
                data, err = api("POST", "/profiles", json={"username": username})
            if err:
                show_notice(err, error=True)
            else:
                st.session_state["user_id"] = data["id"]
                st.session_state["username"] = data["username"]
                st.rerun()

st.title("🌍 Carbon Footprint Tracker")
st.caption("Track. Reduce. Impact.")

tabs = st.tabs(["Dashboard", "Log Activity", "Voice Assistant", "Challenges", "Leaderboard", "Business"])
tab_dashboard, tab_log, tab_voice, tab_challenges, tab_leader, tab_business = tabs

# -------------------------------
# Dashboard
# -------------------------------
with tab_dashboard:
    st.header("Dashboard")
    summary, err = api("GET", "/dashboard")
    if err:
        show_notice(err, error=True)
    else:
        weekly = summary["weekly"]
        c1, c2, c3 = st.columns(3)
        c1.metric("Today's footprint (kg CO₂)", round(summary["today_total"], 1))
        c2.metric("Under daily target (kg)", round(summary["remaining_today"], 1))
        c3.metric("Activities logged", summary["activity_count"])

        st.subheader("Weekly Goal")
        st.progress(min(max(weekly["ratio"], 0.0), 1.0))
        st.write(f"{weekly['progress']:.1f} / {weekly['goal']:g} kg ({weekly['percent_to_go']}% to go)")
        with st.form("goal_form"):
            new_goal = st.number_input("Set your weekly carbon footprint goal in kg CO₂", min_value=0.0,
                                       value=float(weekly["goal"]))
            if st.form_submit_button("Update Goal"):
                _, err = api("PUT", "/goal", json={"value": new_goal})
                if err:
                    show_notice(err, error=True)
                else:
                    st.rerun()

        days = pd.DataFrame(summary["last_seven_days"])
        fig, ax = plt.subplots(figsize=(8, 3))
        ax.fill_between(days["label"], days["co2_kg"], alpha=0.2)
        ax.plot(days["label"], days["co2_kg"], marker="o")
        ax.set_title("Last 7 days")
        ax.set_ylabel("kg CO₂")
        ax.grid(alpha=0.2)
        st.pyplot(fig)

        left, right = st.columns(2)
        with left:
            pie_chart(summary["today_by_category"], "Today")
        with right:
            pie_chart(summary["week_by_category"], "This week")

    rows, err = api("GET", "/activities")
    if rows:
        df = pd.DataFrame(rows)
        df["timestamp"] = pd.to_datetime(df["timestamp"])
        df = df.sort_values("timestamp", ascending=False)
        st.subheader("History")
        st.dataframe(df[["timestamp", "category", "subtype", "quantity", "co2_kg", "source"]].reset_index(drop=True))

# -------------------------------
# Log Activity
# -------------------------------
with tab_log:
    st.header("Log Your Activities")
    factors, _ = api("GET", "/factors")
    sub = st.tabs(["Transport", "Energy", "Food", "Waste"])
    with sub[0]:
        mode = st.selectbox("Transport mode", ["car", "bus", "train", "motorcycle", "bicycle", "walking"])
        distance = st.number_input("Distance (km)", min_value=0.0)
        fuel = st.selectbox("Fuel type", ["petrol", "diesel", "electric", "none"])
        if st.button("Log Transport Activity"):
            show_logged(*api("POST", "/activities/transport",
                             json={"mode": mode, "distance": distance, "fuel": fuel}))
    with sub[1]:
        energy_type = st.selectbox("Energy type", ["electricity", "gas", "heating"],
                                   format_func={"electricity": "Electricity (kWh)", "gas": "Natural Gas (m³)",
                                                "heating": "Heating Oil (L)"}.get)
        usage = st.number_input("Usage amount", min_value=0.0)
        if st.button("Log Energy Activity"):
            show_logged(*api("POST", "/activities/energy", json={"usage": usage, "type": energy_type}))
    with sub[2]:
        food_type = st.selectbox("Food type", ["beef", "lamb", "pork", "chicken", "fish", "vegetarian", "vegan"])
        portions = st.number_input("Portions", min_value=0.0, value=1.0)
        if st.button("Log Food Activity"):
            show_logged(*api("POST", "/activities/food", json={"type": food_type, "portions": portions}))
    with sub[3]:
        waste_type = st.selectbox("Waste type", ["general", "plastic", "food", "paper", "glass"])
        weight = st.number_input("Weight (kg)", min_value=0.0)
        if st.button("Log Waste Activity"):
            show_logged(*api("POST", "/activities/waste", json={"type": waste_type, "weight": weight}))

    if factors:
        st.subheader("Emission Factors (kg CO₂)")
        cols = st.columns(4)
        transport_rows = [{"mode": m, "fuel": f, "per km": v}
                          for m, fuels in factors["transport"].items() for f, v in fuels.items()]
        cols[0].dataframe(pd.DataFrame(transport_rows))
        for col, cat in zip(cols[1:], ["energy", "food", "waste"]):
            col.dataframe(pd.Series(factors[cat], name=f"per {factors['units'][cat]}"))

# -------------------------------
# Voice Assistant
# -------------------------------
with tab_voice:
    st.header("EcoVoice Assistant")
    st.caption('Say things like "I drove 15 kilometers" or "I used electricity for 3 hours"')
    heard = st.text_input("What I heard:")
    if st.button("Send"):
        if not heard.strip():
            st.warning("Say or type an activity first")
        else:
            data, err = api("POST", "/voice", json={"transcript": heard})
            if err:
                show_notice(err, error=True)
            else:
                st.subheader("EcoVoice says:")
                st.write(data["response"])
                show_notice(data.get("notice"))
    st.subheader("Voice Commands")
    examples, _ = api("GET", "/voice/examples")
    for phrase in examples or []:
        st.markdown(f'- "{phrase}"')

# -------------------------------
# Challenges
# -------------------------------
with tab_challenges:
    st.header("Challenges")
    user_id = st.session_state["user_id"]
    if not user_id:
        st.info("Create a profile in the sidebar to take on challenges.")
    else:
        challenges, err = api("GET", "/challenges", params={"user_id": user_id})
        if err:
            show_notice(err, error=True)
        for ch in challenges or []:
            with st.container(border=True):
                st.markdown(f"**{ch['title']}** · {ch['difficulty']} · {ch['points']} pts")
                st.write(ch["description"])
                if ch["status"] == "not_started":
                    if st.button("Start Challenge", key=f"start_{ch['id']}"):
                        data, err = api("POST", f"/challenges/{ch['id']}/start", json={"user_id": user_id})
                        show_notice(err or data["notice"], error=bool(err))
                elif ch["status"] == "in_progress":
                    if st.button("Mark as Complete", key=f"done_{ch['id']}"):
                        data, err = api("POST", f"/challenges/{ch['id']}/complete", json={"user_id": user_id})
                        show_notice(err or data["notice"], error=bool(err))
                else:
                    st.success("Completed")

# -------------------------------
# Leaderboard
# -------------------------------
with tab_leader:
    st.header("Leaderboard")
    board, err = api("GET", "/leaderboard")
    if err:
        show_notice(err, error=True)
    elif board:
        df = pd.DataFrame(board)
        df["you"] = df["user_id"] == st.session_state["user_id"]
        st.table(df[["rank", "username", "total_points", "you"]])
    else:
        st.info("Leaderboard empty")

# -------------------------------
# Business inquiries
# -------------------------------
with tab_business:
    st.header("Business Inquiry")
    with st.form("inquiry_form"):
        company = st.text_input("Company name")
        contact = st.text_input("Contact name")
        email = st.text_input("Email")
        phone = st.text_input("Phone")
        message = st.text_area("Message")
        if st.form_submit_button("Submit Inquiry"):
            data, err = api("POST", "/inquiries", json={"company_name": company, "contact_name": contact,
                                                       "email": email, "phone": phone, "message": message})
            show_notice(err or data["notice"], error=bool(err))
