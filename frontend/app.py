import os

import requests
import streamlit as st

# run.py가 백엔드 포트에 맞춰 넣어줌
API_BASE = os.getenv("API_BASE", "http://127.0.0.1:3000").rstrip("/")

st.set_page_config(page_title="🎵 TikTok Creator Assistant", layout="centered")

st.title("🎵 TikTok Creator Assistant")
st.caption("✅ 아이디어 한 줄 또는 영상 업로드 → 캡션 4개 + 사운드 3개")


def api(method: str, path: str, **kwargs) -> dict:
    try:
        r = requests.request(method, f"{API_BASE}{path}", timeout=600, **kwargs)
        out = r.json()
    except Exception as e:
        st.error(f"요청 실패: {e}")
        st.stop()
    if not out.get("ok"):
        msg = out.get("error", "unknown error")
        if out.get("detail"):
            msg += f" ({out['detail']})"
        st.error(msg)
        st.stop()
    return out


tab_caption, tab_drafts, tab_trends = st.tabs(["✍️ 캡션 만들기", "🗂 초안", "📈 트렌드"])

# ---------------- 캡션 ----------------
with tab_caption:
    video = st.file_uploader("영상 업로드 (선택)", type=["mp4", "mov", "webm", "m4a", "mp3"])
    idea = st.text_area("영상 아이디어 (영상이 없을 때)", value="")

    if st.button("✨ 캡션 생성", type="primary"):
        if not video and not idea.strip():
            st.error("영상을 올리거나 아이디어를 적어주세요.")
            st.stop()

        with st.spinner("생성 중... (영상이면 수십 초 걸릴 수 있음)"):
            if video:
                files = {"video": (video.name, video.getvalue(), video.type)}
                out = api("POST", "/api/caption", files=files)
            else:
                out = api("POST", "/api/caption", json={"idea": idea.strip()})

        st.session_state["last_caption"] = out

    out = st.session_state.get("last_caption")
    if out:
        st.success("완료!")
        st.write("**트렌드:**", " ".join(out.get("trends", [])[:5]))
        st.write("**추천 사운드:**")
        for s in out.get("sounds", []):
            st.markdown(f"- {s}")

        st.write("**캡션:**")
        hashtags = " ".join(out.get("trends", [])[:5])
        for i, c in enumerate(out.get("captions", []), start=1):
            st.text(c)
            if st.button("💾 초안으로 저장", key=f"save_{i}"):
                api("POST", "/api/drafts", json={"name": f"Caption {i}", "caption": c, "hashtags": hashtags})
                st.toast("초안 저장 완료")

# ---------------- 초안 ----------------
with tab_drafts:
    with st.form("new_draft", clear_on_submit=True):
        name = st.text_input("이름")
        caption = st.text_area("캡션")
        tags = st.text_input("해시태그")
        if st.form_submit_button("추가"):
            if not name.strip():
                st.error("이름은 필수입니다.")
            else:
                api("POST", "/api/drafts", json={"name": name.strip(), "caption": caption, "hashtags": tags})
                st.toast("초안 추가 완료")

    drafts = api("GET", "/api/drafts").get("drafts", [])
    if not drafts:
        st.info("저장된 초안이 없습니다.")

    for d in drafts:
        with st.expander(f"{d['name']}  ·  {d.get('updated') or d['created']}"):
            new_name = st.text_input("이름", value=d["name"], key=f"name_{d['id']}")
            new_caption = st.text_area("캡션", value=d.get("caption", ""), key=f"cap_{d['id']}")
            new_tags = st.text_input("해시태그", value=d.get("hashtags", ""), key=f"tags_{d['id']}")

            col1, col2 = st.columns(2)
            with col1:
                if st.button("수정 저장", key=f"upd_{d['id']}"):
                    # 이름은 비우면 안 보냄 -> 서버가 기존 이름 유지
                    patch = {"caption": new_caption, "hashtags": new_tags}
                    if new_name.strip():
                        patch["name"] = new_name.strip()
                    else:
                        st.warning("이름이 비어 있어 기존 이름을 유지합니다.")
                    api("PUT", f"/api/drafts/{d['id']}", json=patch)
                    st.rerun()
            with col2:
                if st.button("🗑 삭제", key=f"del_{d['id']}"):
                    api("DELETE", f"/api/drafts/{d['id']}")
                    st.rerun()

# ---------------- 트렌드 ----------------
with tab_trends:
    if st.button("🔄 새로고침"):
        out = api("GET", "/api/trends")
        st.caption(f"provider: {out.get('provider')}")
        st.write(" ".join(out.get("data", [])))
