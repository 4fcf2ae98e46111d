import os
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from dotenv import load_dotenv

from screening_agent.config import ScreeningConfig
from screening_agent.controller import ScreeningVoiceAgent
from screening_agent.health import check_speech_health
from screening_agent.logs import clip, log_event
from screening_agent.speech import SpeechIO
from screening_agent.store import ScreeningStore

load_dotenv(override=True)

app = FastAPI(title="Screening Voice Agent")


@app.on_event("startup")
def on_startup():
    config = ScreeningConfig.from_env()
    app.state.config = config
    app.state.store = ScreeningStore.from_config(config)
    app.state.speech = SpeechIO.from_env(config)
    app.state.agent = ScreeningVoiceAgent(speech=app.state.speech, config=config)
    log_event(
        f"APP_STARTUP | job={config.job_title} company={config.company} "
        f"data_file={config.data_file or 'memory'} clips={'yes' if app.state.speech.clips else 'no'}"
    )


@app.on_event("shutdown")
async def on_shutdown():
    agent = getattr(app.state, "agent", None)
    if agent is not None:
        agent.stop()
    log_event("APP_SHUTDOWN")


def get_store(request: Request) -> ScreeningStore:
    return request.app.state.store


def get_agent(request: Request) -> ScreeningVoiceAgent:
    return request.app.state.agent


def _session_state(agent: ScreeningVoiceAgent) -> dict:
    state = (agent.last_update or agent.snapshot()).to_dict()
    # Status flags and position are always current, even between published updates.
    state.update(
        {
            "current_step": agent.engine.state.current_step,
            "collected_data": dict(agent.engine.state.collected_data),
            "listening": agent.listening,
            "speaking": agent.speaking,
            "active": agent.active,
            "completed": agent.completed,
            "failed": agent.failed,
            "job_title": agent.job_context.title,
            "company": agent.job_context.company,
        }
    )
    return state


class SessionRequest(BaseModel):
    job_id: str | None = None
    job_title: str | None = None
    company: str | None = None


class MessageRequest(BaseModel):
    text: str


class AudioClipRequest(BaseModel):
    audio_url: str


class JobCreateRequest(BaseModel):
    title: str
    description: str = ""
    requirements: str = ""


class JobUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    requirements: str | None = None


class CandidateCreateRequest(BaseModel):
    name: str
    phone: str = ""
    current_ctc: str | None = None
    expected_ctc: str | None = None
    notice_period: str | None = None
    experience: str | None = None


class CandidateUpdateRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    current_ctc: str | None = None
    expected_ctc: str | None = None
    notice_period: str | None = None
    experience: str | None = None


class AppointmentCreateRequest(BaseModel):
    job_id: str
    candidate_id: str
    date_time: str
    status: Literal["scheduled", "completed", "cancelled"] = "scheduled"


class AppointmentUpdateRequest(BaseModel):
    job_id: str | None = None
    candidate_id: str | None = None
    date_time: str | None = None
    status: Optional[Literal["scheduled", "completed", "cancelled"]] = None


# ----------------- voice session -----------------
@app.post("/voice/session")
async def create_voice_session(
    payload: SessionRequest,
    agent: ScreeningVoiceAgent = Depends(get_agent),
    store: ScreeningStore = Depends(get_store),
):
    job_title = (payload.job_title or "").strip() or None
    if payload.job_id:
        job = store.get_job(payload.job_id)
        if not job:
            raise HTTPException(status_code=404, detail="job not found")
        job_title = job.title
    agent.reset(job_title=job_title, company=(payload.company or "").strip() or None)
    return _session_state(agent)


@app.post("/voice/start")
async def start_voice_session(agent: ScreeningVoiceAgent = Depends(get_agent)):
    await agent.start()
    return _session_state(agent)


@app.post("/voice/stop")
async def stop_voice_session(agent: ScreeningVoiceAgent = Depends(get_agent)):
    agent.stop()
    return _session_state(agent)


@app.post("/voice/message")
async def voice_message(payload: MessageRequest, agent: ScreeningVoiceAgent = Depends(get_agent)):
    text = (payload.text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="text is required")
    result = await agent.submit_utterance(text)
    state = _session_state(agent)
    state["accepted"] = result is not None
    if result is not None:
        state["next_prompt"] = result.next_prompt
        state["extracted_data"] = result.extracted_data
        state["clarification"] = result.clarification
    return state


@app.post("/voice/audio")
async def voice_audio(payload: AudioClipRequest, request: Request):
    clips = request.app.state.speech.clips
    if clips is None:
        raise HTTPException(status_code=409, detail="speech recognizer does not accept audio clips")
    audio_url = (payload.audio_url or "").strip()
    if not audio_url:
        raise HTTPException(status_code=400, detail="audio_url is required")
    clips.submit(audio_url)
    log_event(f"AUDIO_CLIP_QUEUED | url={clip(audio_url, 200)} pending={clips.pending()}")
    return {"ok": True, "pending": clips.pending()}


@app.get("/voice/state")
async def voice_state(agent: ScreeningVoiceAgent = Depends(get_agent)):
    return JSONResponse(_session_state(agent), headers={"Cache-Control": "no-store"})


@app.get("/voice/health")
def voice_health():
    return check_speech_health()


# ----------------- jobs -----------------
@app.get("/jobs")
def list_jobs(store: ScreeningStore = Depends(get_store)):
    return {"jobs": [j.model_dump() for j in store.list_jobs()]}


@app.post("/jobs")
def create_job(payload: JobCreateRequest, store: ScreeningStore = Depends(get_store)):
    jid = store.create_job(payload.title, payload.description, payload.requirements)
    log_event(f"JOB_CREATED | id={jid} title={payload.title}")
    return store.get_job(jid).model_dump()


@app.get("/jobs/{job_id}")
def get_job(job_id: str, store: ScreeningStore = Depends(get_store)):
    job = store.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="job not found")
    return job.model_dump()


@app.put("/jobs/{job_id}")
def update_job(job_id: str, payload: JobUpdateRequest, store: ScreeningStore = Depends(get_store)):
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if not store.update_job(job_id, **changes):
        raise HTTPException(status_code=404, detail="job not found")
    return store.get_job(job_id).model_dump()


@app.delete("/jobs/{job_id}")
def delete_job(job_id: str, store: ScreeningStore = Depends(get_store)):
    if not store.delete_job(job_id):
        raise HTTPException(status_code=404, detail="job not found")
    log_event(f"JOB_DELETED | id={job_id}")
    return {"ok": True, "job_id": job_id}


# ----------------- candidates -----------------
@app.get("/candidates")
def list_candidates(store: ScreeningStore = Depends(get_store)):
    return {"candidates": [c.model_dump() for c in store.list_candidates()]}


@app.post("/candidates")
def create_candidate(payload: CandidateCreateRequest, store: ScreeningStore = Depends(get_store)):
    details = payload.model_dump(exclude={"name", "phone"})
    cid = store.create_candidate(payload.name, payload.phone, **details)
    log_event(f"CANDIDATE_CREATED | id={cid}")
    return store.get_candidate(cid).model_dump()


@app.get("/candidates/{candidate_id}")
def get_candidate(candidate_id: str, store: ScreeningStore = Depends(get_store)):
    candidate = store.get_candidate(candidate_id)
    if not candidate:
        raise HTTPException(status_code=404, detail="candidate not found")
    return candidate.model_dump()


@app.put("/candidates/{candidate_id}")
def update_candidate(candidate_id: str, payload: CandidateUpdateRequest, store: ScreeningStore = Depends(get_store)):
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if not store.update_candidate(candidate_id, **changes):
        raise HTTPException(status_code=404, detail="candidate not found")
    return store.get_candidate(candidate_id).model_dump()


@app.delete("/candidates/{candidate_id}")
def delete_candidate(candidate_id: str, store: ScreeningStore = Depends(get_store)):
    if not store.delete_candidate(candidate_id):
        raise HTTPException(status_code=404, detail="candidate not found")
    return {"ok": True, "candidate_id": candidate_id}


# ----------------- appointments -----------------
@app.get("/appointments")
def list_appointments(
    job_id: str = Query(default=""),
    candidate_id: str = Query(default=""),
    store: ScreeningStore = Depends(get_store),
):
    if job_id:
        items = store.appointments_for_job(job_id)
        if candidate_id:
            items = [a for a in items if a.candidate_id == candidate_id]
    elif candidate_id:
        items = store.appointments_for_candidate(candidate_id)
    else:
        items = store.list_appointments()
    return {"appointments": [a.model_dump() for a in items]}


@app.post("/appointments")
def create_appointment(payload: AppointmentCreateRequest, store: ScreeningStore = Depends(get_store)):
    if not store.get_job(payload.job_id):
        raise HTTPException(status_code=404, detail="job not found")
    if not store.get_candidate(payload.candidate_id):
        raise HTTPException(status_code=404, detail="candidate not found")
    aid = store.create_appointment(payload.job_id, payload.candidate_id, payload.date_time, payload.status)
    log_event(f"APPOINTMENT_CREATED | id={aid} job={payload.job_id} candidate={payload.candidate_id}")
    return store.get_appointment(aid).model_dump()


@app.get("/appointments/{appointment_id}")
def get_appointment(appointment_id: str, store: ScreeningStore = Depends(get_store)):
    appointment = store.get_appointment(appointment_id)
    if not appointment:
        raise HTTPException(status_code=404, detail="appointment not found")
    return appointment.model_dump()


@app.put("/appointments/{appointment_id}")
def update_appointment(
    appointment_id: str,
    payload: AppointmentUpdateRequest,
    store: ScreeningStore = Depends(get_store),
):
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if not store.update_appointment(appointment_id, **changes):
        raise HTTPException(status_code=404, detail="appointment not found")
    return store.get_appointment(appointment_id).model_dump()


@app.delete("/appointments/{appointment_id}")
def delete_appointment(appointment_id: str, store: ScreeningStore = Depends(get_store)):
    if not store.delete_appointment(appointment_id):
        raise HTTPException(status_code=404, detail="appointment not found")
    return {"ok": True, "appointment_id": appointment_id}


# ----------------- dashboard -----------------
@app.get("/dashboard/stats")
def dashboard_stats(store: ScreeningStore = Depends(get_store)):
    return JSONResponse(store.stats(), headers={"Cache-Control": "no-store"})


@app.get("/config/check")
def config_check():
    required = [
        "LIVEKIT_API_KEY",
        "LIVEKIT_API_SECRET",
        "LIVEKIT_URL",
    ]
    status = {k: bool(os.getenv(k, "")) for k in required}
    status["DEEPGRAM_API_KEY"] = bool(os.getenv("DEEPGRAM_API_KEY", ""))
    status["ELEVENLABS_API_KEY"] = bool(os.getenv("ELEVENLABS_API_KEY", ""))
    status["SCREENING_DATA_FILE"] = bool(os.getenv("SCREENING_DATA_FILE", ""))
    return JSONResponse(status)
