from flask import Flask, render_template_string

from prime_api import prime_bp

app = Flask(__name__)
app.register_blueprint(prime_bp)

PAGE = """<!doctype html><html><head>
<meta charset="utf-8"><meta name="viewport" content="width=device-width,initial-scale=1">
<title>PrimeGen</title>
<style>
body{font-family:system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,Helvetica,Arial,sans-serif;margin:0;background:#fafafa;color:#111}
.wrap{max-width:860px;margin:40px auto;padding:0 16px}
.card{background:#fff;border:1px solid #eee;border-radius:12px;padding:16px;margin:18px 0}
label{font-size:12px;color:#555}input,button{font-size:14px;padding:10px;border-radius:8px;border:1px solid #d0d0d0}
input{width:100%;box-sizing:border-box}button{background:#111;color:#fff;cursor:pointer}
.grid{display:grid;grid-template-columns:1fr 1fr;gap:10px}
pre{white-space:pre-wrap;word-break:break-all;background:#f6f6f6;border:1px solid #eee;border-radius:8px;padding:10px}
</style></head><body><div class="wrap">
<h1>PrimeGen</h1>
<div class="card">
  <h3>Generate probable primes</h3>
  <div class="grid">
    <div><label>Bits (multiple of 8, &ge; 32, &le; {{ sync_bits }})</label><input id="p_bits" value="256"/></div>
    <div><label>Count (&le; {{ sync_count }})</label><input id="p_count" value="1"/></div>
  </div>
  <div style="margin-top:8px"><button id="p_go">Generate</button></div>
  <pre id="p_out">–</pre>
</div>
</div>
<script>
document.querySelector('#p_go').onclick=async()=>{
  const bits=(document.querySelector('#p_bits').value||'').trim();
  const count=(document.querySelector('#p_count').value||'1').trim();
  const out=document.querySelector('#p_out');out.textContent='Searching…';
  try{
    const r=await fetch('/api/primes',{method:'POST',headers:{'Content-Type':'application/json'},body:JSON.stringify({bits,count})});
    const j=await r.json();
    if(j.error){out.textContent='Error: '+j.error;return;}
    out.textContent=j.primes.map(p=>p.index+': '+p.value).join('\\n')+'\\n\\n('+j.elapsed_ms+' ms)';
  }catch(e){out.textContent='Error: '+e;}
};
</script></body></html>"""

@app.get("/")
def home():
    from primegen import config
    return render_template_string(PAGE, sync_bits=config.SYNC_MAX_BITS, sync_count=config.SYNC_MAX_COUNT)

if __name__ == "__main__":
    app.run("127.0.0.1", 8082, debug=True)
