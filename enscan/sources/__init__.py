"""AiQiCha and KuaiCha company sources and the MIIT registration plug-in."""